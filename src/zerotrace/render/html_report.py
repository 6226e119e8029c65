"""HTML timeline report.

Renders the action summary, one vis-timeline chart per artifact, the
patient-zero table, per-host event charts and run statistics into a
single tabbed page.
"""

from collections import defaultdict
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from zerotrace.core.pipeline import ReportRun

TEMPLATE_NAME = "timeline.html.j2"

_env: Environment | None = None


def _environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=PackageLoader("zerotrace", "templates"),
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _env


def _action_summary(run: ReportRun) -> dict[str, Any]:
    action = run.commands[0].action if run.commands else None
    started = [c.started_at for c in run.commands if c.started_at]
    finished = [c.finished_at for c in run.commands if c.finished_at]
    return {
        "action_id": run.config.action_id,
        "name": action.name if action else "",
        "target": action.target if action else "",
        "threat_family": action.threat_family if action else None,
        "threat_level": action.threat_level if action else None,
        "valid_from": action.valid_from.isoformat() if action and action.valid_from else None,
        "expire_after": action.expire_after.isoformat() if action and action.expire_after else None,
        "started_at": min(started).isoformat() if started else None,
        "finished_at": max(finished).isoformat() if finished else None,
        "hosts_queried": len({c.host for c in run.commands}),
    }


def _artifact_charts(run: ReportRun) -> list[dict[str, Any]]:
    charts = []
    for index, (identity, occurrences) in enumerate(run.timeline.items()):
        charts.append(
            {
                "dom_id": f"artifact-{index}",
                "identity": identity,
                "module": occurrences[0].module.value,
                "items": [
                    {
                        "id": n,
                        "content": o.host,
                        "start": o.timestamp.isoformat(),
                        "title": f"{o.module.value}: {o.raw_time}",
                    }
                    for n, o in enumerate(occurrences)
                ],
            }
        )
    return charts


def _host_charts(run: ReportRun) -> list[dict[str, Any]]:
    grouped: dict[tuple[str, str], list] = defaultdict(list)
    for record in run.records:
        grouped[(record.host, record.module.value)].append(record)

    charts = []
    for index, ((host, module), records) in enumerate(sorted(grouped.items())):
        charts.append(
            {
                "dom_id": f"host-{index}",
                "host": host,
                "module": module,
                "items": [
                    {
                        "id": n,
                        "content": r.identity,
                        "start": r.timestamp.isoformat(),
                        "title": f"{module}: {r.raw_time}",
                    }
                    for n, r in enumerate(records)
                ],
            }
        )
    return charts


def render_html(run: ReportRun) -> str:
    """Render a run as a self-contained HTML timeline page."""
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(
        title=run.config.report_name,
        action=_action_summary(run),
        artifacts=_artifact_charts(run),
        ranking=run.ranking,
        verdicts=run.verdicts,
        hosts=_host_charts(run),
        summary=run.summary,
        hosts_with_results=len({r.host for r in run.records}),
        errors=run.errors,
    )
