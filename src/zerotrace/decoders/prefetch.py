"""Decoder for prefetch-module results."""

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

from zerotrace.decoders.base import BaseDecoder, DecoderRegistry
from zerotrace.models.artifact import PrefetchArtifact
from zerotrace.models.command import ModuleKind


class _PrefetchResult(BaseModel):
    exename: str = Field(..., min_length=1)
    dllname: str | None = None
    execdate: str = Field(..., min_length=1)
    runcount: str | None = None

    @field_validator("runcount", mode="before")
    @classmethod
    def stringify_runcount(cls, v: object) -> object:
        """Older agents emit the run counter as a number."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


@DecoderRegistry.register
class PrefetchDecoder(BaseDecoder):
    """Decodes ``{label: [{"exename": ..., "execdate": ..., "runcount": ...}]}`` payloads."""

    module: ClassVar[ModuleKind] = ModuleKind.PREFETCH
    entry_model: ClassVar[type[BaseModel]] = _PrefetchResult

    def to_descriptor(self, label: str, entry: _PrefetchResult) -> PrefetchArtifact:
        return PrefetchArtifact(
            search=label,
            exe_name=entry.exename,
            dll_name=entry.dllname or None,
            exec_date=entry.execdate,
            run_count=entry.runcount,
        )
