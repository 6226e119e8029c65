"""Normalization layer for cross-host correlation.

Provides:
- IdentityNormalizer: canonical identities so one artifact matches across hosts
- normalize_timestamp: module-specific time strings to UTC datetimes
- ArtifactTimeline: identity -> per-host occurrence index
"""

from zerotrace.normalizer.identity import IdentityNormalizer, normalize_identity
from zerotrace.normalizer.timeline import ArtifactTimeline
from zerotrace.normalizer.timestamp import normalize_timestamp

__all__ = [
    "ArtifactTimeline",
    "IdentityNormalizer",
    "normalize_identity",
    "normalize_timestamp",
]
