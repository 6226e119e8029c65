"""CSV report: one detail row per occurrence record."""

import csv
import io

from zerotrace.core.pipeline import ReportRun
from zerotrace.render.detail import DETAIL_COLUMNS, detail_rows


def render_csv(run: ReportRun) -> str:
    """Render occurrence records as CSV, grouped by module."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=DETAIL_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(detail_rows(run))
    return buffer.getvalue()
