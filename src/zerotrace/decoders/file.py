"""Decoder for file-module search results."""

from typing import ClassVar

from pydantic import BaseModel, Field

from zerotrace.decoders.base import BaseDecoder, DecoderRegistry
from zerotrace.models.artifact import FileArtifact
from zerotrace.models.command import ModuleKind


class _FileInfo(BaseModel):
    size: float = Field(default=0, ge=0)
    mode: str | None = None
    lastmodified: str = Field(..., min_length=1)
    sha256: str | None = None


class _MatchedFile(BaseModel):
    file: str = Field(..., min_length=1)
    fileinfo: _FileInfo


@DecoderRegistry.register
class FileDecoder(BaseDecoder):
    """Decodes ``{label: [{"file": ..., "fileinfo": {...}}]}`` payloads.

    The ``search`` block the agent echoes back for every match repeats the
    action parameters and is not kept.
    """

    module: ClassVar[ModuleKind] = ModuleKind.FILE
    entry_model: ClassVar[type[BaseModel]] = _MatchedFile

    def to_descriptor(self, label: str, entry: _MatchedFile) -> FileArtifact:
        info = entry.fileinfo
        return FileArtifact(
            search=label,
            path=entry.file,
            size=int(info.size),
            mode=info.mode,
            mtime=info.lastmodified,
            sha256=info.sha256 or None,
        )
