"""Command models: one module invocation's result on one host."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ModuleKind(str, Enum):
    """Agent module that produced a result payload."""

    FILE = "file"
    REGISTRY = "registry"
    PREFETCH = "prefetch"


class CommandStatus:
    """Command status values reported by the scheduler."""

    SENT = "sent"
    SUCCESS = "success"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    FAILED = "failed"
    TIMEOUT = "timeout"


class ActionInfo(BaseModel):
    """Investigation action a command belongs to."""

    action_id: int = Field(default=0, ge=0, description="Action identifier (0 if unknown)")
    name: str = Field(default="", description="Action name")
    target: str = Field(default="", description="Agent targeting expression")
    threat_level: str | None = Field(default=None, description="Threat level hunted")
    threat_family: str | None = Field(default=None, description="Threat family hunted")
    threat_type: str | None = Field(default=None, description="Threat type hunted")
    valid_from: datetime | None = Field(default=None, description="Action validity start")
    expire_after: datetime | None = Field(default=None, description="Action expiry")

    model_config = {"extra": "forbid", "frozen": True}


class Command(BaseModel):
    """Result of one module run on one host.

    The payload is kept opaque here; the decoders turn it into
    artifact descriptors.
    """

    module: ModuleKind = Field(..., description="Module that produced the payload")
    host: str = Field(..., min_length=1, description="Agent host name")
    status: str = Field(default=CommandStatus.SUCCESS, description="Command status")
    payload: Any = Field(default=None, description="Raw module result elements")
    started_at: datetime | None = Field(default=None, description="Command start time")
    finished_at: datetime | None = Field(default=None, description="Command finish time")
    command_id: int = Field(default=0, ge=0, description="Command identifier")
    action: ActionInfo = Field(default_factory=ActionInfo, description="Parent action")
    agent_version: str | None = Field(default=None, description="Agent version")
    found_anything: bool | None = Field(default=None, description="Module reported a hit")
    success: bool | None = Field(default=None, description="Module ran without fatal errors")

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def action_id(self) -> int:
        return self.action.action_id
