"""Plain-text report: occurrences grouped by module and host, then the ranking."""

from collections import defaultdict

from zerotrace.core.pipeline import ReportRun
from zerotrace.models.occurrence import OccurrenceRecord

RULE = "-" * 50


def render_text(run: ReportRun) -> str:
    """Render a run as plain text."""
    lines: list[str] = []

    for module in run.modules:
        lines.append(f"Module: {module.value}")
        lines.append("-" * 27)

        by_host: dict[str, list[OccurrenceRecord]] = defaultdict(list)
        for record in run.records:
            if record.module == module:
                by_host[record.host].append(record)

        for host in sorted(by_host):
            lines.append(f"Agent: {host}")
            searches = sorted({r.search for r in by_host[host] if r.search})
            if searches:
                lines.append(f"Search: {', '.join(searches)}")
            for number, record in enumerate(by_host[host], start=1):
                lines.append(f"Artifact {number} : {record.identity}")
                lines.append(f"{'':<11}: Date : {record.timestamp.isoformat()}")
            lines.append("")
        lines.append(RULE)

    lines.append("Patient Zero")
    lines.append("-" * 27)
    if not run.ranking:
        lines.append("No artifacts indexed.")
    width = max((len(score.host) for score in run.ranking), default=0)
    for position, score in enumerate(run.ranking, start=1):
        lines.append(f"{position:>3}. {score.host:<{width}}  {score.score}")
    lines.append(RULE)

    if run.summary is not None:
        lines.append(
            f"Artifacts indexed: {run.summary.artifacts_indexed}  "
            f"Commands skipped: {run.summary.commands_skipped}  "
            f"Timestamp errors: {run.summary.timestamp_errors}"
        )

    return "\n".join(lines) + "\n"
