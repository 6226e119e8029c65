"""Cross-host artifact timeline index.

Maps each canonical artifact identity to the hosts that reported it, in
the order their occurrences were inserted. A host is recorded at most
once per identity: the first occurrence inserted for it wins.
"""

from collections.abc import Iterator

from zerotrace.models.occurrence import OccurrenceRecord


class ArtifactTimeline:
    """Artifact identity -> ordered per-host occurrence list."""

    def __init__(self) -> None:
        self._entries: dict[str, list[OccurrenceRecord]] = {}
        self._hosts: dict[str, set[str]] = {}

    def insert(self, occurrence: OccurrenceRecord) -> bool:
        """Insert one occurrence.

        Args:
            occurrence: Normalized occurrence record

        Returns:
            True if the occurrence was added, False if the host already
            had an entry for this identity (the timeline is unchanged)
        """
        seen = self._hosts.setdefault(occurrence.identity, set())
        if occurrence.host in seen:
            return False

        seen.add(occurrence.host)
        self._entries.setdefault(occurrence.identity, []).append(occurrence)
        return True

    def get(self, identity: str) -> tuple[OccurrenceRecord, ...]:
        """Occurrences for an identity (empty if unknown)."""
        return tuple(self._entries.get(identity, ()))

    def __getitem__(self, identity: str) -> tuple[OccurrenceRecord, ...]:
        if identity not in self._entries:
            raise KeyError(identity)
        return tuple(self._entries[identity])

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[tuple[str, tuple[OccurrenceRecord, ...]]]:
        """Iterate (identity, occurrences) in first-seen order."""
        for identity, occurrences in self._entries.items():
            yield identity, tuple(occurrences)

    def hosts(self) -> list[str]:
        """All hosts with at least one occurrence, sorted."""
        return sorted({host for seen in self._hosts.values() for host in seen})

    def occurrence_count(self) -> int:
        """Total number of occurrence records held."""
        return sum(len(occurrences) for occurrences in self._entries.values())
