"""Structured error model for zerotrace."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error record.

    Fatal errors are emitted in this shape by the CLI, and recoverable
    errors (skipped commands, dropped timestamps) are collected in this
    shape on the run result.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., DECODE_ERROR)",
        examples=[
            "DECODE_ERROR",
            "TIMESTAMP_PARSE_ERROR",
            "CONFIG_ERROR",
            "SOURCE_ERROR",
            "RENDER_ERROR",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (command_id, host, module, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for zerotrace."""

    DECODE_ERROR = "DECODE_ERROR"
    TIMESTAMP_PARSE_ERROR = "TIMESTAMP_PARSE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    SOURCE_ERROR = "SOURCE_ERROR"
    RENDER_ERROR = "RENDER_ERROR"
    UNSUPPORTED_MODULE = "UNSUPPORTED_MODULE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
