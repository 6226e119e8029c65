"""Artifact identity normalization.

The same file dropped into two user profiles, or reported by hosts with
different path conventions, must map to one identity so the timeline
can line the hosts up against each other.
"""

import re
from collections.abc import Iterable

from zerotrace.models.artifact import (
    ArtifactDescriptor,
    FileArtifact,
    PrefetchArtifact,
    RegistryArtifact,
)
from zerotrace.models.command import ModuleKind

SEPARATOR = "/"
USER_PLACEHOLDER = "USER"
DEFAULT_PROFILE_ROOTS = frozenset({"Users", "Documents and Settings", "home"})

_SPLIT_RE = re.compile(r"[\\/]")


class IdentityNormalizer:
    """Computes canonical identities for artifact descriptors.

    A path segment counts as a user-profile directory when it is one of
    ``profile_tokens`` or sits directly under one of ``profile_roots``.
    Both comparisons ignore case.
    """

    def __init__(
        self,
        profile_tokens: Iterable[str] = (),
        profile_roots: Iterable[str] = DEFAULT_PROFILE_ROOTS,
    ) -> None:
        self.profile_tokens = frozenset(t.casefold() for t in profile_tokens if t)
        self.profile_roots = frozenset(r.casefold() for r in profile_roots if r)

    def normalize(self, module: ModuleKind | str, descriptor: ArtifactDescriptor) -> str:
        """Return the canonical identity of a descriptor.

        Args:
            module: Module that reported the descriptor
            descriptor: Decoded artifact

        Returns:
            Identity string using ``/`` as the only separator

        Raises:
            ValueError: If the descriptor does not belong to the module
        """
        module = ModuleKind(module)

        if module is ModuleKind.FILE and isinstance(descriptor, FileArtifact):
            identity = self.file_identity(descriptor.path)
        elif module is ModuleKind.REGISTRY and isinstance(descriptor, RegistryArtifact):
            identity = descriptor.key
        elif module is ModuleKind.PREFETCH and isinstance(descriptor, PrefetchArtifact):
            identity = descriptor.exe_name
        else:
            raise ValueError(
                f"{type(descriptor).__name__} cannot be normalized as a {module.value} artifact"
            )

        return canonical_separators(identity)

    def file_identity(self, path: str) -> str:
        """Reduce a file path to its last three segments.

        Paths with three or fewer segments reduce to the file name alone.
        """
        segments = [s for s in _SPLIT_RE.split(path) if s]
        if not segments:
            return path
        if len(segments) <= 3:
            return segments[-1]

        profile, subdir, leaf = segments[-3:]
        if self.is_profile_segment(profile, parent=segments[-4]):
            profile = USER_PLACEHOLDER
        return SEPARATOR.join((profile, subdir, leaf))

    def is_profile_segment(self, segment: str, parent: str | None = None) -> bool:
        """Whether ``segment`` names a user-profile directory."""
        if segment.casefold() in self.profile_tokens:
            return True
        return parent is not None and parent.casefold() in self.profile_roots


def canonical_separators(identity: str) -> str:
    """Replace backslashes with the canonical separator."""
    return identity.replace("\\", SEPARATOR)


def normalize_identity(
    module: ModuleKind | str,
    descriptor: ArtifactDescriptor,
    profile_tokens: Iterable[str] = (),
    profile_roots: Iterable[str] = DEFAULT_PROFILE_ROOTS,
) -> str:
    """Compute a descriptor's identity without keeping a normalizer around."""
    return IdentityNormalizer(profile_tokens, profile_roots).normalize(module, descriptor)
