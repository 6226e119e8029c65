"""Command source backed by a JSON or JSONL export.

Two record shapes are accepted:

- flat commands, one module result each::

    {"module": "prefetch", "host": "ws-01", "status": "success",
     "payload": {...}, "starttime": "...", "finishtime": "..."}

- MIG command rows as stored by the scheduler, where
  ``action.operations[i]`` produced ``results[i]``::

    {"id": 12, "status": "success", "results": [{"elements": {...}}],
     "action": {"id": 3, "operations": [{"module": "file"}], ...},
     "agent": {"name": "ws-01", "version": "..."}, ...}

A MIG row expands to one Command per operation handled by a decoder.
"""

import json
import re
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from zerotrace.core import logging as log
from zerotrace.core.errors import SourceError
from zerotrace.models.command import ActionInfo, Command, ModuleKind

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")
_SUPPORTED_MODULES = {kind.value for kind in ModuleKind}


def _coerce_datetime(value: Any) -> datetime | None:
    """Parse an RFC 3339 time as written by the scheduler.

    Nanosecond fractions are truncated to microseconds. Go's zero time
    and unparseable values become None.
    """
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip()).replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.year <= 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class _Lenient(BaseModel):
    model_config = {"extra": "ignore"}


class _Threat(_Lenient):
    level: str | None = None
    family: str | None = None
    type: str | None = None


class _Operation(_Lenient):
    module: str


class _Action(_Lenient):
    id: int = 0
    name: str = ""
    target: str = ""
    threat: _Threat | None = None
    operations: list[_Operation] = Field(default_factory=list)
    validfrom: Any = None
    expireafter: Any = None

    def to_info(self) -> ActionInfo:
        threat = self.threat or _Threat()
        return ActionInfo(
            action_id=max(self.id, 0),
            name=self.name,
            target=self.target,
            threat_level=threat.level or None,
            threat_family=threat.family or None,
            threat_type=threat.type or None,
            valid_from=_coerce_datetime(self.validfrom),
            expire_after=_coerce_datetime(self.expireafter),
        )


class _Agent(_Lenient):
    name: str = Field(..., min_length=1)
    version: str | None = None


class _Result(_Lenient):
    foundanything: Any = None
    success: Any = None
    elements: Any = None

    @classmethod
    def of(cls, raw: Any) -> "_Result":
        """Wrap one ``results[i]`` value.

        Anything that is not a result mapping is handed on as the payload
        so the decoder rejects that command alone.
        """
        if isinstance(raw, dict):
            return cls.model_validate(raw)
        return cls(elements=raw)

    @staticmethod
    def flag(value: Any) -> bool | None:
        return value if isinstance(value, bool) else None


class _MigCommand(_Lenient):
    id: int = 0
    status: str
    results: list[Any] | None = None
    starttime: Any = None
    finishtime: Any = None
    action: _Action
    agent: _Agent

    @field_validator("results", mode="before")
    @classmethod
    def null_results(cls, v: Any) -> Any:
        return v or []


class _FlatCommand(_Lenient):
    module: str
    host: str = Field(..., min_length=1)
    status: str = "success"
    payload: Any = None
    starttime: Any = None
    finishtime: Any = None
    command_id: int = 0
    action_id: int = 0
    action_name: str = ""


def expand_record(raw: dict[str, Any]) -> list[Command]:
    """Turn one export record into Commands.

    Args:
        raw: Decoded JSON object

    Returns:
        Commands for every supported module in the record

    Raises:
        ValidationError: If the record matches neither shape
    """
    if "action" in raw and "agent" in raw:
        return _expand_mig(_MigCommand.model_validate(raw))
    return _expand_flat(_FlatCommand.model_validate(raw))


def _expand_mig(row: _MigCommand) -> list[Command]:
    action = row.action.to_info()
    commands = []
    for index, operation in enumerate(row.action.operations):
        if operation.module not in _SUPPORTED_MODULES:
            log.debug("Ignoring unsupported module", module=operation.module, command_id=row.id)
            continue
        result = _Result.of(row.results[index] if index < len(row.results) else None)
        commands.append(
            Command(
                module=ModuleKind(operation.module),
                host=row.agent.name,
                status=row.status,
                payload=result.elements,
                started_at=_coerce_datetime(row.starttime),
                finished_at=_coerce_datetime(row.finishtime),
                command_id=max(row.id, 0),
                action=action,
                agent_version=row.agent.version,
                found_anything=_Result.flag(result.foundanything),
                success=_Result.flag(result.success),
            )
        )
    return commands


def _expand_flat(flat: _FlatCommand) -> list[Command]:
    if flat.module not in _SUPPORTED_MODULES:
        log.debug("Ignoring unsupported module", module=flat.module, host=flat.host)
        return []
    return [
        Command(
            module=ModuleKind(flat.module),
            host=flat.host,
            status=flat.status,
            payload=flat.payload,
            started_at=_coerce_datetime(flat.starttime),
            finished_at=_coerce_datetime(flat.finishtime),
            command_id=max(flat.command_id, 0),
            action=ActionInfo(action_id=max(flat.action_id, 0), name=flat.action_name),
        )
    ]


def _read_records(path: Path) -> Iterator[tuple[int, Any]]:
    """Yield (line or index, decoded object) from a JSON array or JSONL file."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceError(f"Cannot read export '{path}': {e}", path=str(path)) from e

    stripped = content.lstrip()
    if stripped.startswith("["):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in '{path}': {e.msg}", path=str(path), line=e.lineno) from e
        yield from enumerate(data)
        return

    for lineno, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            yield lineno, json.loads(line)
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in '{path}': {e.msg}", path=str(path), line=lineno) from e


def select_commands(
    commands: Iterable[Command],
    action_id: int | None = None,
    statuses: Iterable[str] | None = None,
    modules: Iterable[ModuleKind | str] | None = None,
) -> list[Command]:
    """Keep commands matching the action, status and module filters.

    A filter left as None matches everything.
    """
    wanted_statuses = set(statuses) if statuses is not None else None
    wanted_modules = {ModuleKind(m) for m in modules} if modules is not None else None

    selected = []
    for command in commands:
        if action_id is not None and command.action_id != action_id:
            continue
        if wanted_statuses is not None and command.status not in wanted_statuses:
            continue
        if wanted_modules is not None and command.module not in wanted_modules:
            continue
        selected.append(command)
    return selected


def load_commands(
    path: Path,
    action_id: int | None = None,
    statuses: Iterable[str] | None = None,
    modules: Iterable[ModuleKind | str] | None = None,
) -> list[Command]:
    """Load and filter commands from an export file.

    Args:
        path: JSON array or JSONL export
        action_id: Keep only commands of this action
        statuses: Keep only commands with these statuses
        modules: Keep only results of these modules

    Returns:
        Commands in file order

    Raises:
        SourceError: If the file cannot be read or a record is not a command
    """
    path = Path(path)
    if not path.exists():
        raise SourceError(f"Export '{path}' not found", path=str(path))

    commands: list[Command] = []
    for position, raw in _read_records(path):
        if not isinstance(raw, dict):
            raise SourceError(
                f"Record {position} in '{path}' is not a JSON object",
                path=str(path),
                line=position,
            )
        try:
            commands.extend(expand_record(raw))
        except ValidationError as e:
            raise SourceError(
                f"Record {position} in '{path}' is not a command: {e.error_count()} validation error(s)",
                path=str(path),
                line=position,
            ) from e

    selected = select_commands(commands, action_id=action_id, statuses=statuses, modules=modules)
    log.info("Loaded commands", path=str(path), total=len(commands), selected=len(selected))
    return selected
