"""Shared fixtures for zerotrace tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from zerotrace.core import logging as log
from zerotrace.models.command import ActionInfo, Command, ModuleKind


def file_payload(path: str, mtime: str, label: str = "s1", sha256: str | None = None) -> dict:
    info: dict[str, Any] = {"size": 1024, "mode": "-rw-r--r--", "lastmodified": mtime}
    if sha256 is not None:
        info["sha256"] = sha256
    return {label: [{"file": path, "search": {"names": ["x"]}, "fileinfo": info}]}


def registry_payload(key: str, lastwrite: str, label: str = "s1", hive: str = "HKLM") -> dict:
    return {label: [{"hive": hive, "key": key, "lastwrite": lastwrite}]}


def prefetch_payload(exe: str, execdate: str, label: str = "s1", runcount: Any = "1") -> dict:
    return {label: [{"exename": exe, "dllname": "", "execdate": execdate, "runcount": runcount}]}


def make_command(
    module: ModuleKind | str,
    host: str,
    payload: Any,
    command_id: int = 1,
    action_id: int = 7,
    status: str = "success",
) -> Command:
    return Command(
        module=ModuleKind(module),
        host=host,
        status=status,
        payload=payload,
        command_id=command_id,
        action=ActionInfo(action_id=action_id, name="hunt"),
    )


def mig_row(
    row_id: int,
    host: str,
    operations: list[str],
    elements: list[Any],
    action_id: int = 7,
    status: str = "success",
) -> dict:
    return {
        "id": row_id,
        "status": status,
        "starttime": "2023-01-02T08:00:00.123456789Z",
        "finishtime": "2023-01-02T08:05:00Z",
        "results": [{"foundanything": True, "success": True, "elements": e} for e in elements],
        "action": {
            "id": action_id,
            "name": "evil hunt",
            "target": "status='online'",
            "threat": {"level": "high", "family": "malware"},
            "validfrom": "2023-01-02T07:00:00Z",
            "expireafter": "0001-01-01T00:00:00Z",
            "operations": [{"module": m, "parameters": {}} for m in operations],
        },
        "agent": {"name": host, "version": "20230101"},
    }


@pytest.fixture(autouse=True)
def reset_logging():
    log.configure_logging(log_format="text", quiet=True, verbose=False)
    yield
    log.configure_logging(log_format="text", quiet=False, verbose=False)


@pytest.fixture
def scenario_commands() -> list[Command]:
    """Prefetch A before B, a duplicated file on C, and a D/E tie."""
    return [
        make_command("prefetch", "host-a", prefetch_payload("malware.exe", "2023-01-01T10:00:00"), 1),
        make_command("prefetch", "host-b", prefetch_payload("malware.exe", "2023-01-01T12:00:00"), 2),
        make_command(
            "file",
            "host-c",
            file_payload(r"C:\Users\mike\Downloads\evil.exe", "2023-01-01 09:00:00 +0000 UTC"),
            3,
        ),
        make_command(
            "file",
            "host-c",
            file_payload(r"C:\Users\mike\Downloads\evil.exe", "2023-01-01 08:00:00 +0000 UTC"),
            4,
        ),
        make_command("registry", "host-e", registry_payload(r"Software\Run\evil", "2023-01-01 11:00:00Z"), 5),
        make_command("registry", "host-d", registry_payload(r"Software\Run\evil", "2023-01-01 11:00:00Z"), 6),
    ]


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    """JSONL export mixing MIG rows and flat commands."""
    rows = [
        mig_row(
            10,
            "host-a",
            ["prefetch", "netstat"],
            [prefetch_payload("malware.exe", "2023-01-01 10:00:00"), {"x": []}],
        ),
        mig_row(11, "host-b", ["prefetch"], [prefetch_payload("malware.exe", "2023-01-01 12:00:00")]),
        mig_row(12, "host-c", ["prefetch"], [prefetch_payload("malware.exe", "2023-01-01 13:00:00")], status="failed"),
        {
            "module": "registry",
            "host": "host-b",
            "payload": registry_payload(r"Software\Run\evil", "2023-01-01 09:00:00Z"),
            "command_id": 13,
            "action_id": 7,
        },
        {
            "module": "file",
            "host": "host-d",
            "payload": file_payload("/tmp/x", "2023-01-01 09:00:00"),
            "command_id": 14,
            "action_id": 8,
        },
    ]
    path = tmp_path / "export.jsonl"
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n", encoding="utf-8")
    return path
