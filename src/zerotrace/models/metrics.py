"""Run summary model for zerotrace."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class RunSummary(BaseModel):
    """Counters and timing for one reporting run.

    Emitted to stderr after every run so the analyst can see how much
    of the input actually made it into the timeline.
    """

    run_id: UUID = Field(
        ...,
        description="Correlation ID for this run",
    )

    zerotrace_version: str = Field(
        ...,
        description="zerotrace version",
    )

    started_at: datetime = Field(
        ...,
        description="ISO-8601 start timestamp",
    )

    completed_at: datetime | None = Field(
        default=None,
        description="ISO-8601 completion timestamp",
    )

    duration_ms: int = Field(
        default=0,
        ge=0,
        description="Execution time in milliseconds",
    )

    commands_seen: int = Field(
        default=0,
        ge=0,
        description="Commands handed to the run",
    )

    commands_decoded: int = Field(
        default=0,
        ge=0,
        description="Commands whose payload decoded",
    )

    commands_skipped: int = Field(
        default=0,
        ge=0,
        description="Commands skipped because of a decode error",
    )

    occurrences_indexed: int = Field(
        default=0,
        ge=0,
        description="Occurrence records inserted into the timeline",
    )

    duplicates_dropped: int = Field(
        default=0,
        ge=0,
        description="Occurrences dropped because the host was already recorded",
    )

    timestamp_errors: int = Field(
        default=0,
        ge=0,
        description="Occurrences dropped because the time did not parse",
    )

    artifacts_indexed: int = Field(
        default=0,
        ge=0,
        description="Distinct artifact identities in the timeline",
    )

    hosts: int = Field(
        default=0,
        ge=0,
        description="Distinct hosts in the timeline",
    )

    aborted: bool = Field(
        default=False,
        description="Whether a fatal error ended the run early",
    )

    model_config = {"extra": "forbid"}
