"""Structured error handling for zerotrace."""

import sys
from typing import Any, NoReturn

from zerotrace.models.error import ErrorCode, StructuredError


class ZerotraceError(Exception):
    """Base exception for zerotrace errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)

    def with_context(self, **context: Any) -> "ZerotraceError":
        """Merge extra context once the caller knows it."""
        merged = {**(self.error.context or {}), **context}
        self.error = self.error.model_copy(update={"context": merged})
        return self


class DecodeError(ZerotraceError):
    """Module payload is malformed or does not match the module schema."""

    def __init__(self, module: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(
            code=ErrorCode.DECODE_ERROR,
            message=f"Cannot decode {module} payload: {message}",
            remediation="Check the agent module output for this command; it was skipped",
            retryable=False,
            context={"module": module, **(context or {})},
        )
        self.module = module


class ParseError(ZerotraceError):
    """Timestamp did not match any encoding accepted for its module."""

    def __init__(self, module: str, value: str, layouts: list[str]):
        super().__init__(
            code=ErrorCode.TIMESTAMP_PARSE_ERROR,
            message=f"Cannot parse {module} timestamp {value!r}",
            remediation=f"Expected one of: {', '.join(layouts)}",
            retryable=False,
            context={"module": module, "value": value, "layouts": layouts},
        )
        self.module = module
        self.value = value


class UnsupportedModuleError(ZerotraceError):
    """Module kind has no decoder."""

    def __init__(self, module: str, supported: list[str]):
        super().__init__(
            code=ErrorCode.UNSUPPORTED_MODULE,
            message=f"Module '{module}' is not supported",
            remediation=f"Supported modules: {', '.join(supported)}",
            retryable=False,
            context={"module": module, "supported": supported},
        )


class ConfigError(ZerotraceError):
    """Configuration file missing or invalid."""

    def __init__(self, message: str, path: str | None = None, errors: list[str] | None = None):
        context: dict[str, Any] = {}
        if path:
            context["path"] = path
        if errors:
            context["errors"] = errors
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            remediation="Fix the configuration file or command-line options and try again",
            retryable=False,
            context=context or None,
        )


class SourceError(ZerotraceError):
    """Command export could not be read."""

    def __init__(self, message: str, path: str | None = None, line: int | None = None):
        context: dict[str, Any] = {}
        if path:
            context["path"] = path
        if line is not None:
            context["line"] = line
        super().__init__(
            code=ErrorCode.SOURCE_ERROR,
            message=message,
            remediation="Check that the export is a JSON array or JSONL file of command records",
            retryable=False,
            context=context or None,
        )


class RenderError(ZerotraceError):
    """Report output could not be written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            code=ErrorCode.RENDER_ERROR,
            message=message,
            remediation="Check that the output directory exists and is writable",
            retryable=True,
            context={"path": path} if path else None,
        )


def handle_error(error: ZerotraceError | Exception, exit_code: int = 1) -> NoReturn:
    """Handle an error by outputting it and exiting.

    Args:
        error: The error to handle
        exit_code: Exit code to use
    """
    from zerotrace.cli.output import output_error

    if isinstance(error, ZerotraceError):
        output_error(error.to_structured())
    else:
        structured = StructuredError(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(error),
            remediation="This is an unexpected error. Please report it.",
            retryable=False,
            context={"type": type(error).__name__},
        )
        output_error(structured)

    sys.exit(exit_code)
