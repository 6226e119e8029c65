"""Occurrence and ranking models."""

from datetime import datetime

from pydantic import BaseModel, Field

from zerotrace.models.artifact import ArtifactDescriptor
from zerotrace.models.command import Command, ModuleKind


class OccurrenceRecord(BaseModel):
    """One host's observation of one artifact at one normalized time."""

    identity: str = Field(..., min_length=1, description="Canonical artifact identity")
    host: str = Field(..., min_length=1, description="Host that observed the artifact")
    module: ModuleKind = Field(..., description="Module that reported the artifact")
    status: str = Field(..., description="Status of the originating command")
    timestamp: datetime = Field(..., description="Normalized absolute time (UTC)")
    raw_time: str = Field(..., description="Time string as reported by the agent")
    command_id: int = Field(default=0, ge=0, description="Originating command")
    action_id: int = Field(default=0, ge=0, description="Originating action")
    search: str = Field(default="", description="Search label from the payload")
    descriptor: ArtifactDescriptor | None = Field(
        default=None,
        description="Decoded descriptor the occurrence was derived from",
    )
    command: Command | None = Field(
        default=None,
        exclude=True,
        description="Originating command (action, agent and result flags)",
    )

    model_config = {"extra": "forbid", "frozen": True}


class HostScore(BaseModel):
    """Suspicion score of one host."""

    host: str = Field(..., description="Host identifier")
    score: int = Field(..., ge=0, description="Artifacts for which the host was seen first")

    model_config = {"extra": "forbid", "frozen": True}


class ArtifactVerdict(BaseModel):
    """Host credited with the earliest sighting of one artifact."""

    identity: str = Field(..., description="Canonical artifact identity")
    module: ModuleKind = Field(..., description="Module of the winning occurrence")
    host: str = Field(..., description="Host with the earliest occurrence")
    timestamp: datetime = Field(..., description="Earliest occurrence time")
    hosts_seen: int = Field(..., ge=1, description="Number of hosts that reported the artifact")
    tied_hosts: list[str] = Field(
        default_factory=list,
        description="Other hosts sharing the earliest timestamp",
    )

    model_config = {"extra": "forbid", "frozen": True}
