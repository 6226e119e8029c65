"""Pydantic models for zerotrace."""

from zerotrace.models.artifact import (
    ArtifactDescriptor,
    FileArtifact,
    PrefetchArtifact,
    RegistryArtifact,
)
from zerotrace.models.command import ActionInfo, Command, ModuleKind
from zerotrace.models.error import ErrorCode, StructuredError
from zerotrace.models.metrics import RunSummary
from zerotrace.models.occurrence import ArtifactVerdict, HostScore, OccurrenceRecord

__all__ = [
    "ActionInfo",
    "ArtifactDescriptor",
    "ArtifactVerdict",
    "Command",
    "ErrorCode",
    "FileArtifact",
    "HostScore",
    "ModuleKind",
    "OccurrenceRecord",
    "PrefetchArtifact",
    "RegistryArtifact",
    "RunSummary",
    "StructuredError",
]
