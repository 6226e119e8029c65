"""Run ID generation and counters for a reporting run."""

import time
from datetime import UTC, datetime
from uuid import UUID, uuid4

from zerotrace import __version__
from zerotrace.models.metrics import RunSummary


def generate_run_id() -> UUID:
    """Generate a unique run ID.

    Returns:
        UUID v4 for run correlation
    """
    return uuid4()


class RunMetrics:
    """Collects counters while the pipeline processes commands."""

    def __init__(self, run_id: UUID | None = None):
        self.run_id = run_id or generate_run_id()
        self.started_at = datetime.now(UTC)
        self.completed_at: datetime | None = None
        self._start = time.perf_counter()
        self._end: float | None = None

        self.commands_seen = 0
        self.commands_decoded = 0
        self.commands_skipped = 0
        self.occurrences_indexed = 0
        self.duplicates_dropped = 0
        self.timestamp_errors = 0
        self.aborted = False

    @property
    def duration_ms(self) -> int:
        """Get execution duration in milliseconds."""
        end = self._end or time.perf_counter()
        return int((end - self._start) * 1000)

    def complete(self, aborted: bool = False) -> None:
        """Mark the run as finished."""
        self._end = time.perf_counter()
        self.completed_at = datetime.now(UTC)
        self.aborted = aborted

    def to_summary(self, artifacts: int = 0, hosts: int = 0) -> RunSummary:
        """Convert to RunSummary model.

        Args:
            artifacts: Distinct identities in the finished timeline
            hosts: Distinct hosts in the finished timeline
        """
        return RunSummary(
            run_id=self.run_id,
            zerotrace_version=__version__,
            started_at=self.started_at,
            completed_at=self.completed_at,
            duration_ms=self.duration_ms,
            commands_seen=self.commands_seen,
            commands_decoded=self.commands_decoded,
            commands_skipped=self.commands_skipped,
            occurrences_indexed=self.occurrences_indexed,
            duplicates_dropped=self.duplicates_dropped,
            timestamp_errors=self.timestamp_errors,
            artifacts_indexed=artifacts,
            hosts=hosts,
            aborted=self.aborted,
        )
