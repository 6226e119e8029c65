"""Report renderers.

Each renderer turns a finished ReportRun into text; ``render`` picks one
by output mode and writes the result to stdout or to a file named after
the action.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from zerotrace.core import logging as log
from zerotrace.core.config import OutputMode
from zerotrace.core.errors import RenderError
from zerotrace.core.pipeline import ReportRun
from zerotrace.render.csv_report import render_csv
from zerotrace.render.detail import DETAIL_COLUMNS, detail_rows
from zerotrace.render.html_report import render_html
from zerotrace.render.text_report import render_text

RENDERERS: dict[str, tuple[Callable[[ReportRun], str], str | None]] = {
    "stdout": (render_text, None),
    "file": (render_text, ".txt"),
    "csv": (render_csv, ".csv"),
    "timeline": (render_html, ".html"),
}


def render(
    run: ReportRun,
    mode: OutputMode | None = None,
    output_dir: Path | None = None,
    stream: TextIO | None = None,
) -> Path | None:
    """Render a run in the requested mode.

    Args:
        run: Finished run
        mode: Output mode (defaults to the run's configured mode)
        output_dir: Directory for file output (defaults to the configured
            directory, then the current directory)
        stream: Stream for ``stdout`` mode (defaults to sys.stdout)

    Returns:
        Path of the written file, or None when writing to a stream

    Raises:
        RenderError: If the output file cannot be written
    """
    mode = mode or run.config.output_mode
    renderer, suffix = RENDERERS[mode]
    content = renderer(run)

    if suffix is None:
        (stream or sys.stdout).write(content)
        return None

    directory = Path(output_dir or run.config.output_dir or ".")
    path = directory / f"{run.config.report_name}{suffix}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise RenderError(f"Cannot write report '{path}': {e}", path=str(path)) from e

    log.info("Report written", mode=mode, path=str(path))
    return path


__all__ = [
    "DETAIL_COLUMNS",
    "RENDERERS",
    "detail_rows",
    "render",
    "render_csv",
    "render_html",
    "render_text",
]
