"""stderr logging for zerotrace runs.

stdout carries reports and command results only, so every diagnostic
goes to stderr, either as ``[level] message key=value`` lines or as one
JSON object per line. Context bound with ``bind`` (the run id, usually)
is attached to every later message until ``unbind``.
"""

import json
import sys
import time
from datetime import UTC, datetime
from typing import Any, Literal

LogLevel = Literal["debug", "info", "warning", "error"]
LogFormat = Literal["text", "json"]

_SEVERITY: dict[str, int] = {"debug": 10, "info": 20, "warning": 30, "error": 40}

_threshold = _SEVERITY["info"]
_quiet = False
_verbose = False
_log_format: LogFormat = "text"
_bound: dict[str, Any] = {}


def configure_logging(
    log_format: LogFormat = "text",
    quiet: bool = False,
    verbose: bool | None = None,
) -> None:
    """Configure the stderr logger.

    Args:
        log_format: ``text`` lines or ``json`` lines
        quiet: Only warnings and errors; no progress output
        verbose: Include debug messages (left unchanged when None)
    """
    global _log_format, _quiet, _verbose, _threshold
    _log_format = log_format
    _quiet = quiet
    if verbose is not None:
        _verbose = verbose

    if quiet:
        _threshold = _SEVERITY["warning"]
    else:
        _threshold = _SEVERITY["debug"] if _verbose else _SEVERITY["info"]


def bind(**context: Any) -> None:
    """Attach context to every following message."""
    _bound.update(context)


def unbind(*keys: str) -> None:
    """Drop bound context (all of it when no keys are given)."""
    if not keys:
        _bound.clear()
    for key in keys:
        _bound.pop(key, None)


def log(message: str, level: LogLevel = "info", **context: Any) -> None:
    """Write one message to stderr if its level passes the threshold."""
    if _SEVERITY[level] < _threshold:
        return

    fields = {**_bound, **context}
    if _log_format == "json":
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "message": message,
            **fields,
        }
        print(json.dumps(entry, default=str), file=sys.stderr)
        return

    parts = [f"[{level}] {message}"]
    parts.extend(f"{k}={v}" for k, v in fields.items())
    print(" ".join(parts), file=sys.stderr)


def debug(message: str, **context: Any) -> None:
    log(message, level="debug", **context)


def info(message: str, **context: Any) -> None:
    log(message, level="info", **context)


def warning(message: str, **context: Any) -> None:
    log(message, level="warning", **context)


def error(message: str, **context: Any) -> None:
    log(message, level="error", **context)


class ProgressReporter:
    """Progress of the decode loop on stderr.

    Redraws at most ten times a second and always on the last item.
    Silent in quiet mode and for empty batches.
    """

    def __init__(self, total: int, description: str = "Processing", unit: str = "commands"):
        self.total = total
        self.description = description
        self.unit = unit
        self.current = 0
        self.start_time = time.perf_counter()
        self._drawn_at = 0.0

    @property
    def enabled(self) -> bool:
        return not _quiet and self.total > 0

    def update(self, amount: int = 1) -> None:
        self.current += amount
        if not self.enabled:
            return

        now = time.perf_counter()
        if self.current < self.total and now - self._drawn_at < 0.1:
            return
        self._drawn_at = now

        if _log_format == "json":
            print(
                json.dumps({"progress": {"stage": self.description, "done": self.current, "total": self.total}}),
                file=sys.stderr,
            )
        else:
            print(f"\r{self.description}: {self.current}/{self.total} {self.unit}", end="", file=sys.stderr)

    def finish(self) -> None:
        if not self.enabled:
            return

        elapsed = round(time.perf_counter() - self.start_time, 2)
        if _log_format == "json":
            print(
                json.dumps({"complete": {"stage": self.description, "done": self.current, "seconds": elapsed}}),
                file=sys.stderr,
            )
        else:
            print(f"\n{self.description}: {self.current} {self.unit} in {elapsed:.2f}s", file=sys.stderr)
