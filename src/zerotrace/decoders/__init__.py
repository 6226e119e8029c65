"""Decoders for agent module payloads."""

# Import decoders to register them
from zerotrace.decoders import (
    file,  # noqa: F401
    prefetch,  # noqa: F401
    registry,  # noqa: F401
)
from zerotrace.decoders.base import BaseDecoder, DecoderRegistry, decode

__all__ = ["BaseDecoder", "DecoderRegistry", "decode"]
