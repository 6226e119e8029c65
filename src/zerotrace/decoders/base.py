"""Base decoder interface for zerotrace."""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from zerotrace.core.errors import DecodeError, UnsupportedModuleError
from zerotrace.models.artifact import ArtifactDescriptor
from zerotrace.models.command import ModuleKind


class BaseDecoder(ABC):
    """Base class for module payload decoders.

    Agent modules return their elements as a mapping of search label to
    a list of entries. Subclasses declare the wire model for one entry
    and convert each validated entry to an artifact descriptor.
    """

    module: ClassVar[ModuleKind]
    entry_model: ClassVar[type[BaseModel]]

    def decode(self, payload: Any) -> list[ArtifactDescriptor]:
        """Decode a raw payload into artifact descriptors.

        Args:
            payload: Module elements as a mapping, or its JSON text

        Returns:
            Descriptors in payload order (empty when the module found nothing)

        Raises:
            DecodeError: If the payload or any entry is malformed
        """
        descriptors = []
        for label, index, raw_entry in self._iter_entries(payload):
            try:
                entry = self.entry_model.model_validate(raw_entry)
                descriptors.append(self.to_descriptor(label, entry))
            except ValidationError as e:
                raise DecodeError(
                    self.module.value,
                    f"entry {index} of search '{label}' is invalid",
                    context={
                        "search": label,
                        "index": index,
                        "errors": [
                            f"{'.'.join(str(p) for p in err['loc']) or '<entry>'}: {err['msg']}"
                            for err in e.errors()
                        ],
                    },
                ) from e
        return descriptors

    @abstractmethod
    def to_descriptor(self, label: str, entry: Any) -> ArtifactDescriptor:
        """Convert one validated wire entry to a descriptor."""
        ...

    def _iter_entries(self, payload: Any) -> Iterator[tuple[str, int, Any]]:
        """Yield (search label, index, raw entry) from the payload mapping."""
        elements = self._load(payload)
        for label, entries in elements.items():
            if entries is None:
                continue
            if not isinstance(entries, list):
                raise DecodeError(
                    self.module.value,
                    f"search '{label}' must map to a list, got {type(entries).__name__}",
                    context={"search": label},
                )
            for index, entry in enumerate(entries):
                yield str(label), index, entry

    def _load(self, payload: Any) -> dict[str, Any]:
        """Bring the payload into its canonical mapping form."""
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8", errors="replace")
        if isinstance(payload, str):
            try:
                payload = json.loads(payload) if payload.strip() else None
            except json.JSONDecodeError as e:
                raise DecodeError(self.module.value, f"payload is not valid JSON ({e.msg})") from e

        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise DecodeError(
                self.module.value,
                f"payload must be a mapping of search label to entries, got {type(payload).__name__}",
            )
        return payload


class DecoderRegistry:
    """Registry of available decoders."""

    _decoders: ClassVar[dict[ModuleKind, type[BaseDecoder]]] = {}

    @classmethod
    def register(cls, decoder_class: type[BaseDecoder]) -> type[BaseDecoder]:
        """Register a decoder class.

        Args:
            decoder_class: Decoder class to register

        Returns:
            The registered class (for use as decorator)
        """
        cls._decoders[decoder_class.module] = decoder_class
        return decoder_class

    @classmethod
    def get(cls, module: ModuleKind | str) -> type[BaseDecoder] | None:
        """Get decoder for a module kind."""
        try:
            return cls._decoders.get(ModuleKind(module))
        except ValueError:
            return None

    @classmethod
    def supported_modules(cls) -> list[str]:
        """Get list of supported module names."""
        return [module.value for module in cls._decoders]


def decode(module: ModuleKind | str, payload: Any) -> list[ArtifactDescriptor]:
    """Decode one command payload produced by ``module``.

    Args:
        module: Module kind that produced the payload
        payload: Raw module elements

    Returns:
        List of artifact descriptors

    Raises:
        UnsupportedModuleError: If no decoder exists for the module
        DecodeError: If the payload is malformed
    """
    decoder_class = DecoderRegistry.get(module)
    if decoder_class is None:
        name = module.value if isinstance(module, ModuleKind) else str(module)
        raise UnsupportedModuleError(name, DecoderRegistry.supported_modules())
    return decoder_class().decode(payload)
