"""Artifact descriptor models.

Each agent module decodes to its own descriptor shape; the three shapes
form a tagged union discriminated on ``kind``.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator


class FileArtifact(BaseModel):
    """File matched by a file-module search."""

    kind: Literal["file"] = "file"
    search: str = Field(..., description="Search label that matched the file")
    path: str = Field(..., min_length=1, description="Full path on the host")
    size: int = Field(default=0, ge=0, description="File size in bytes")
    mode: str | None = Field(default=None, description="File mode string")
    mtime: str = Field(..., description="Last-modified time as reported by the agent")
    sha256: str | None = Field(
        default=None,
        description="SHA-256 of file contents as reported, lower-cased",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("sha256")
    @classmethod
    def validate_lowercase_hash(cls, v: str | None) -> str | None:
        """Ensure hash is lowercase."""
        return v.lower() if v else v

    @property
    def raw_time(self) -> str:
        return self.mtime


class RegistryArtifact(BaseModel):
    """Registry key reported by the registry module."""

    kind: Literal["registry"] = "registry"
    search: str = Field(..., description="Search label that matched the key")
    hive: str = Field(default="", description="Hive the key lives in")
    key: str = Field(..., min_length=1, description="Registry key path")
    last_write: str = Field(..., description="Key last-write time as reported by the agent")

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def raw_time(self) -> str:
        return self.last_write


class PrefetchArtifact(BaseModel):
    """Execution record reported by the prefetch module."""

    kind: Literal["prefetch"] = "prefetch"
    search: str = Field(..., description="Search label that matched the record")
    exe_name: str = Field(..., min_length=1, description="Executable name")
    dll_name: str | None = Field(default=None, description="Loaded DLL, when searched for")
    exec_date: str = Field(..., description="Execution date as reported by the agent")
    run_count: str | None = Field(default=None, description="Prefetch run counter")

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def raw_time(self) -> str:
        return self.exec_date


ArtifactDescriptor = Annotated[
    FileArtifact | RegistryArtifact | PrefetchArtifact,
    Field(discriminator="kind"),
]
