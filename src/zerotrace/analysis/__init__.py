"""Analysis over the finished artifact timeline."""

from zerotrace.analysis.patient_zero import first_seen, rank

__all__ = ["first_seen", "rank"]
