"""Decoder for registry-module results."""

from typing import ClassVar

from pydantic import BaseModel, Field

from zerotrace.decoders.base import BaseDecoder, DecoderRegistry
from zerotrace.models.artifact import RegistryArtifact
from zerotrace.models.command import ModuleKind


class _RegRecord(BaseModel):
    hive: str = ""
    key: str = Field(..., min_length=1)
    lastwrite: str = Field(..., min_length=1)


@DecoderRegistry.register
class RegistryDecoder(BaseDecoder):
    """Decodes ``{label: [{"hive": ..., "key": ..., "lastwrite": ...}]}`` payloads."""

    module: ClassVar[ModuleKind] = ModuleKind.REGISTRY
    entry_model: ClassVar[type[BaseModel]] = _RegRecord

    def to_descriptor(self, label: str, entry: _RegRecord) -> RegistryArtifact:
        return RegistryArtifact(
            search=label,
            hive=entry.hive,
            key=entry.key,
            last_write=entry.lastwrite,
        )
