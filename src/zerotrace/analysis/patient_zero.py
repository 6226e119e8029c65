"""Patient-zero ranking.

Every artifact in the timeline credits exactly one host: the one that
reported it earliest. Hosts are ranked by how many artifacts they were
first to report.

Ties are broken by host name so the same input always yields the same
ranking: among hosts sharing the earliest timestamp for an artifact the
lexicographically smallest host is credited, and hosts with equal
scores are listed in ascending host order.
"""

from collections import Counter

from zerotrace.models.occurrence import ArtifactVerdict, HostScore, OccurrenceRecord
from zerotrace.normalizer.timeline import ArtifactTimeline


def _earliest(occurrences: tuple[OccurrenceRecord, ...]) -> OccurrenceRecord:
    return min(occurrences, key=lambda o: (o.timestamp, o.host))


def first_seen(timeline: ArtifactTimeline) -> list[ArtifactVerdict]:
    """Pick the host credited for each artifact.

    Args:
        timeline: Finished artifact timeline

    Returns:
        One verdict per identity, in timeline order
    """
    verdicts = []
    for identity, occurrences in timeline.items():
        if not occurrences:
            continue
        winner = _earliest(occurrences)
        tied = sorted(
            o.host
            for o in occurrences
            if o.timestamp == winner.timestamp and o.host != winner.host
        )
        verdicts.append(
            ArtifactVerdict(
                identity=identity,
                module=winner.module,
                host=winner.host,
                timestamp=winner.timestamp,
                hosts_seen=len(occurrences),
                tied_hosts=tied,
            )
        )
    return verdicts


def rank(timeline: ArtifactTimeline) -> list[HostScore]:
    """Rank hosts by number of artifacts they reported first.

    Hosts present in the timeline that never reported first are included
    with a score of 0.

    Args:
        timeline: Finished artifact timeline

    Returns:
        Host scores sorted by score descending, then host ascending
    """
    scores: Counter[str] = Counter({host: 0 for host in timeline.hosts()})
    for verdict in first_seen(timeline):
        scores[verdict.host] += 1

    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [HostScore(host=host, score=score) for host, score in ordered]
