"""Per-occurrence detail rows.

Flattens every occurrence record with its originating command and the
module-specific descriptor fields (path, size, hash, hive, DLL, run
count). Fields that do not apply to a module are None.
"""

from typing import Any

from zerotrace.core.pipeline import ReportRun
from zerotrace.models.artifact import FileArtifact, PrefetchArtifact, RegistryArtifact
from zerotrace.models.occurrence import OccurrenceRecord

DETAIL_COLUMNS = [
    "action_id",
    "command_id",
    "status",
    "threat_level",
    "threat_family",
    "threat_type",
    "found_anything",
    "success",
    "module",
    "search",
    "host",
    "agent_version",
    "artifact",
    "location",
    "timestamp",
    "reported_time",
    "size",
    "mode",
    "sha256",
    "dll_name",
    "run_count",
]


def _descriptor_fields(record: OccurrenceRecord) -> dict[str, Any]:
    descriptor = record.descriptor
    if isinstance(descriptor, FileArtifact):
        return {
            "location": descriptor.path,
            "size": descriptor.size,
            "mode": descriptor.mode,
            "sha256": descriptor.sha256,
        }
    if isinstance(descriptor, RegistryArtifact):
        location = f"{descriptor.hive}\\{descriptor.key}" if descriptor.hive else descriptor.key
        return {"location": location}
    if isinstance(descriptor, PrefetchArtifact):
        return {
            "location": descriptor.exe_name,
            "dll_name": descriptor.dll_name,
            "run_count": descriptor.run_count,
        }
    return {}


def detail_row(record: OccurrenceRecord) -> dict[str, Any]:
    """One flat row for an occurrence record."""
    row: dict[str, Any] = dict.fromkeys(DETAIL_COLUMNS)
    row.update(
        action_id=record.action_id,
        command_id=record.command_id,
        status=record.status,
        module=record.module.value,
        search=record.search,
        host=record.host,
        artifact=record.identity,
        timestamp=record.timestamp.isoformat(),
        reported_time=record.raw_time,
    )

    command = record.command
    if command is not None:
        row.update(
            threat_level=command.action.threat_level,
            threat_family=command.action.threat_family,
            threat_type=command.action.threat_type,
            found_anything=command.found_anything,
            success=command.success,
            agent_version=command.agent_version,
        )

    row.update(_descriptor_fields(record))
    return row


def detail_rows(run: ReportRun) -> list[dict[str, Any]]:
    """Detail rows for every record, grouped by module in report order."""
    return [
        detail_row(record)
        for module in run.modules
        for record in run.records
        if record.module == module
    ]
