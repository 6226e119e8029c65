"""Result output for the zerotrace CLI.

Rankings and timelines go to stdout as one JSON array, JSONL, or a
fixed-width table. Errors are always JSON so callers can parse them.
"""

import json
import sys
from collections.abc import Iterable
from typing import Any, Literal, TextIO

from pydantic import BaseModel

OutputFormat = Literal["json", "jsonl", "human"]


def to_plain(data: Any) -> Any:
    """Turn models (and lists of them) into JSON-ready values."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    if isinstance(data, (list, tuple)):
        return [to_plain(item) for item in data]
    return data


def output_json(data: Any, file: TextIO | None = None) -> None:
    """Write data as one JSON document."""
    file = file or sys.stdout
    json.dump(to_plain(data), file, ensure_ascii=False, default=str)
    file.write("\n")
    file.flush()


def output_jsonl(records: Iterable[Any], file: TextIO | None = None) -> None:
    """Write records one JSON object per line."""
    file = file or sys.stdout
    for record in records:
        file.write(json.dumps(to_plain(record), ensure_ascii=False, default=str))
        file.write("\n")
    file.flush()


def output_table(
    records: list[dict[str, Any]],
    columns: list[str],
    title: str | None = None,
    file: TextIO | None = None,
    max_width: int = 60,
) -> None:
    """Write the given columns of records as a fixed-width table."""
    file = file or sys.stdout

    if title:
        file.write(f"{title}\n{'=' * len(title)}\n\n")

    if not records:
        file.write("No results.\n")
        file.flush()
        return

    cells = [["" if r.get(col) is None else str(r[col]) for col in columns] for r in records]
    widths = [
        min(max_width, max(len(col), *(len(row[i]) for row in cells)))
        for i, col in enumerate(columns)
    ]

    def line(values: list[str]) -> str:
        out = []
        for value, width in zip(values, widths, strict=True):
            if len(value) > width:
                value = value[: width - 3] + "..."
            out.append(value.ljust(width))
        return " | ".join(out).rstrip()

    header = line(columns)
    file.write(header + "\n" + "-" * len(header) + "\n")
    for row in cells:
        file.write(line(row) + "\n")
    file.write(f"\n{len(records)} row(s)\n")
    file.flush()


def output_error(error: Any, file: TextIO | None = None) -> None:
    """Write a structured error as JSON."""
    output_json(error, file=file)


class OutputFormatter:
    """Writes command results in the format picked on the command line."""

    def __init__(self, format: OutputFormat = "json"):
        self.format = format

    def rows(self, records: list[Any], columns: list[str], title: str | None = None) -> None:
        """Write a list of results."""
        plain = to_plain(records)
        if self.format == "human":
            output_table(plain, columns=columns, title=title)
        elif self.format == "jsonl":
            output_jsonl(plain)
        else:
            output_json(plain)

    def error(self, error: Any) -> None:
        """Write an error in JSON regardless of format."""
        output_error(error)
