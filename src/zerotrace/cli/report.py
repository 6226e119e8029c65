"""Reporting CLI commands."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from zerotrace.cli.output import OutputFormatter, output_json
from zerotrace.core.config import ReportConfig
from zerotrace.core.errors import ParseError, ZerotraceError
from zerotrace.core.pipeline import ReportPipeline, ReportRun
from zerotrace.models.command import ModuleKind
from zerotrace.render import detail_rows, render
from zerotrace.sources import load_commands

EXPORT_ARGUMENT = click.argument(
    "export",
    type=click.Path(path_type=Path, dir_okay=False),
)


def filter_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every reporting command."""
    options = [
        click.option(
            "--module",
            "-m",
            "modules",
            multiple=True,
            type=click.Choice([kind.value for kind in ModuleKind]),
            help="Module to include (can be repeated, default: all)",
        ),
        click.option("--action", "-a", "action_id", type=int, default=None, help="Only this action ID"),
        click.option(
            "--status",
            "-s",
            "statuses",
            multiple=True,
            help="Command status to include (can be repeated, default: success)",
        ),
        click.option(
            "--profile-token",
            "-p",
            "profile_tokens",
            multiple=True,
            help="Directory name treated as a user profile (can be repeated)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(ctx: click.Context, **overrides: Any) -> ReportConfig:
    base: ReportConfig = ctx.obj["config"]
    if overrides.get("modules"):
        overrides["modules"] = [ModuleKind(m) for m in overrides["modules"]]
    for key in ("statuses", "profile_tokens"):
        if overrides.get(key):
            overrides[key] = set(overrides[key])
    return base.merged(**overrides)


def _run(config: ReportConfig, export: Path) -> ReportRun:
    commands = load_commands(
        export,
        action_id=config.action_id,
        statuses=config.statuses,
        modules=config.modules,
    )
    return ReportPipeline(config).run(commands)


def _emit_summary(ctx: click.Context, run: ReportRun | None) -> None:
    if ctx.obj.get("quiet") or run is None or run.summary is None:
        return
    output_json(run.summary, file=sys.stderr)


@click.command()
@EXPORT_ARGUMENT
@filter_options
@click.option(
    "--mode",
    type=click.Choice(["stdout", "csv", "file", "timeline"]),
    default=None,
    help="Report renderer (default: stdout)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for csv/file/timeline output",
)
@click.option(
    "--strict-timestamps",
    is_flag=True,
    default=False,
    help="Abort on the first unparseable timestamp",
)
@click.pass_context
def report(
    ctx: click.Context,
    export: Path,
    modules: tuple[str, ...],
    action_id: int | None,
    statuses: tuple[str, ...],
    profile_tokens: tuple[str, ...],
    mode: str | None,
    output_dir: Path | None,
    strict_timestamps: bool,
) -> None:
    """Build the cross-host timeline from EXPORT and render a report."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    pipeline = None
    try:
        config = _build_config(
            ctx,
            modules=modules,
            action_id=action_id,
            statuses=statuses,
            profile_tokens=profile_tokens,
            output_mode=mode,
            output_dir=output_dir,
            strict_timestamps=True if strict_timestamps else None,
        )
        commands = load_commands(
            export,
            action_id=config.action_id,
            statuses=config.statuses,
            modules=config.modules,
        )
        pipeline = ReportPipeline(config)
        run = pipeline.run(commands)
        path = render(run)
    except ParseError as e:
        formatter.error(e.to_structured_error())
        _emit_summary(ctx, pipeline.result if pipeline else None)
        ctx.exit(1)
    except ZerotraceError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    if path is not None:
        click.echo(str(path))
    _emit_summary(ctx, run)


@click.command()
@EXPORT_ARGUMENT
@filter_options
@click.pass_context
def rank(
    ctx: click.Context,
    export: Path,
    modules: tuple[str, ...],
    action_id: int | None,
    statuses: tuple[str, ...],
    profile_tokens: tuple[str, ...],
) -> None:
    """Rank hosts in EXPORT by first-seen artifact count."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        config = _build_config(
            ctx,
            modules=modules,
            action_id=action_id,
            statuses=statuses,
            profile_tokens=profile_tokens,
        )
        run = _run(config, export)
    except ZerotraceError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    formatter.rows(run.ranking, columns=["host", "score"], title="Patient Zero Ranking")
    _emit_summary(ctx, run)


@click.command()
@EXPORT_ARGUMENT
@filter_options
@click.pass_context
def timeline(
    ctx: click.Context,
    export: Path,
    modules: tuple[str, ...],
    action_id: int | None,
    statuses: tuple[str, ...],
    profile_tokens: tuple[str, ...],
) -> None:
    """List every artifact in EXPORT with the hosts that reported it."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        config = _build_config(
            ctx,
            modules=modules,
            action_id=action_id,
            statuses=statuses,
            profile_tokens=profile_tokens,
        )
        run = _run(config, export)
    except ZerotraceError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    verdicts = {verdict.identity: verdict for verdict in run.verdicts}
    entries = []
    for identity, occurrences in run.timeline.items():
        verdict = verdicts[identity]
        entries.append(
            {
                "identity": identity,
                "module": verdict.module.value,
                "first_host": verdict.host,
                "first_seen": verdict.timestamp.isoformat(),
                "hosts": len(occurrences),
                "occurrences": [
                    {
                        "host": o.host,
                        "timestamp": o.timestamp.isoformat(),
                        "raw_time": o.raw_time,
                        "command_id": o.command_id,
                    }
                    for o in occurrences
                ],
            }
        )

    formatter.rows(
        entries,
        columns=["identity", "module", "first_host", "first_seen", "hosts"],
        title="Artifact Timeline",
    )
    _emit_summary(ctx, run)


@click.command()
@EXPORT_ARGUMENT
@filter_options
@click.pass_context
def records(
    ctx: click.Context,
    export: Path,
    modules: tuple[str, ...],
    action_id: int | None,
    statuses: tuple[str, ...],
    profile_tokens: tuple[str, ...],
) -> None:
    """List every occurrence in EXPORT with its command and artifact detail."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        config = _build_config(
            ctx,
            modules=modules,
            action_id=action_id,
            statuses=statuses,
            profile_tokens=profile_tokens,
        )
        run = _run(config, export)
    except ZerotraceError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    formatter.rows(
        detail_rows(run),
        columns=["host", "module", "location", "timestamp", "size", "sha256"],
        title="Artifact Records",
    )
    _emit_summary(ctx, run)
