"""zerotrace CLI entry point and global options."""

from pathlib import Path

import click

from zerotrace import __version__
from zerotrace.cli.output import OutputFormat, OutputFormatter
from zerotrace.cli.report import rank, records, report, timeline
from zerotrace.core.config import ReportConfig, load_config
from zerotrace.core.errors import ZerotraceError, handle_error
from zerotrace.core.logging import LogFormat, configure_logging

EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2


@click.group()
@click.option(
    "--format", "-f",
    type=click.Choice(["json", "jsonl", "human"]),
    default="json",
    help="Result format for rank and timeline (default: json)",
)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="YAML or JSON report configuration; flags override it",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages to stderr")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors; no progress or run summary")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="stderr log format (default: text)",
)
@click.version_option(version=__version__, prog_name="zerotrace")
@click.pass_context
def cli(
    ctx: click.Context,
    format: OutputFormat,
    config_path: Path | None,
    verbose: bool,
    quiet: bool,
    log_format: LogFormat,
) -> None:
    """Correlate MIG sweep results across hosts.

    Lines up file, registry and prefetch artifacts reported by many agents
    on one timeline and ranks hosts by how many artifacts they showed first.
    """
    configure_logging(log_format=log_format, quiet=quiet, verbose=verbose)
    formatter = OutputFormatter(format=format)

    try:
        config = load_config(config_path) if config_path else ReportConfig()
    except ZerotraceError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(EXIT_INVALID_ARGS)

    ctx.obj = {"formatter": formatter, "config": config, "quiet": quiet}


for command in (report, rank, timeline, records):
    cli.add_command(command)


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except Exception as e:
        handle_error(e, EXIT_ERROR)


if __name__ == "__main__":
    main()
