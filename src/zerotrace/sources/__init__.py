"""Command sources feeding the reporting pipeline."""

from zerotrace.sources.export import expand_record, load_commands, select_commands

__all__ = ["expand_record", "load_commands", "select_commands"]
