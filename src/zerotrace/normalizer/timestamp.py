"""Timestamp normalization for module-reported times.

Each agent module formats times its own way:

- file:     ``2016-08-01 10:00:00.123456789 +0000 UTC`` (fraction optional;
            zones without an abbreviation repeat the offset),
            falling back to ``2016-08-01 10:00:00``
- registry: ``2016-08-01 10:00:00Z`` (fraction optional)
- prefetch: ``2016-08-01 10:00:00.123456`` (fraction optional)

All of them are parsed to timezone-aware UTC datetimes. Encodings
without a zone are taken as UTC.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

from zerotrace.core.errors import ParseError
from zerotrace.models.command import ModuleKind

_DATE_TIME = r"(?P<date>\d{4}-\d{2}-\d{2})[ T](?P<time>\d{2}:\d{2}:\d{2})"
_FRACTION = r"(?:\.(?P<fraction>\d+))?"


@dataclass(frozen=True)
class TimeLayout:
    """One accepted encoding."""

    name: str
    pattern: re.Pattern[str]

    def parse(self, value: str) -> datetime | None:
        """Parse ``value`` or return None when it does not match."""
        match = self.pattern.fullmatch(value.strip())
        if match is None:
            return None

        try:
            parsed = datetime.strptime(
                f"{match['date']} {match['time']}", "%Y-%m-%d %H:%M:%S"
            )
        except ValueError:
            return None

        groups = match.groupdict()
        fraction = groups.get("fraction")
        if fraction:
            parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))

        offset = groups.get("offset")
        try:
            tz = _offset_to_tz(offset) if offset else UTC
            return parsed.replace(tzinfo=tz).astimezone(UTC)
        except (ValueError, OverflowError):
            return None


def _offset_to_tz(offset: str) -> timezone:
    sign = -1 if offset[0] == "-" else 1
    hours, minutes = int(offset[1:3]), int(offset[3:5])
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


FILE_LAYOUT = TimeLayout(
    "YYYY-MM-DD HH:MM:SS[.fraction] +HHMM ZONE",
    re.compile(_DATE_TIME + _FRACTION + r" (?P<offset>[+-]\d{4}) (?P<zone>[A-Za-z]{1,5}|[+-]\d{4})"),
)
FILE_FALLBACK_LAYOUT = TimeLayout(
    "YYYY-MM-DD HH:MM:SS",
    re.compile(_DATE_TIME),
)
REGISTRY_LAYOUT = TimeLayout(
    "YYYY-MM-DD HH:MM:SS[.fraction]Z",
    re.compile(_DATE_TIME + _FRACTION + r"Z"),
)
PREFETCH_LAYOUT = TimeLayout(
    "YYYY-MM-DD HH:MM:SS[.fraction]",
    re.compile(_DATE_TIME + _FRACTION),
)

LAYOUTS: dict[ModuleKind, tuple[TimeLayout, ...]] = {
    ModuleKind.FILE: (FILE_LAYOUT, FILE_FALLBACK_LAYOUT),
    ModuleKind.REGISTRY: (REGISTRY_LAYOUT,),
    ModuleKind.PREFETCH: (PREFETCH_LAYOUT,),
}


def normalize_timestamp(module: ModuleKind | str, value: str) -> datetime:
    """Parse a module-reported time string.

    Args:
        module: Module that reported the time
        value: Time string exactly as the agent emitted it

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ParseError: If no encoding accepted for the module matches
    """
    module = ModuleKind(module)
    layouts = LAYOUTS[module]

    if isinstance(value, str):
        for layout in layouts:
            parsed = layout.parse(value)
            if parsed is not None:
                return parsed

    raise ParseError(module.value, str(value), [layout.name for layout in layouts])
