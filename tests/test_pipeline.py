"""Tests for the reporting pipeline."""

from datetime import UTC, datetime

import pytest

from conftest import make_command, prefetch_payload, registry_payload
from zerotrace.core.config import ReportConfig
from zerotrace.core.errors import ParseError
from zerotrace.core.pipeline import ReportPipeline, run_report
from zerotrace.models.command import ModuleKind
from zerotrace.models.error import ErrorCode


def scores(run) -> dict[str, int]:
    return {s.host: s.score for s in run.ranking}


class TestScenarios:
    def test_earlier_host_credited(self, scenario_commands):
        run = run_report(scenario_commands[:2])
        assert scores(run) == {"host-a": 1, "host-b": 0}
        assert run.patient_zero.host == "host-a"

    def test_duplicate_occurrence_on_same_host(self, scenario_commands):
        run = run_report(scenario_commands[2:4])
        entries = run.timeline["USER/Downloads/evil.exe"]
        assert len(entries) == 1
        assert entries[0].host == "host-c"
        assert entries[0].timestamp == datetime(2023, 1, 1, 9, tzinfo=UTC)
        assert entries[0].command_id == 3
        assert run.summary.duplicates_dropped == 1
        assert len(run.records) == 2

    def test_tie_is_deterministic(self, scenario_commands):
        winners = {run_report(scenario_commands[4:]).verdicts[0].host for _ in range(3)}
        reversed_winner = run_report(list(reversed(scenario_commands[4:]))).verdicts[0].host
        assert winners == {"host-d"}
        assert reversed_winner == "host-d"

    def test_full_run(self, scenario_commands):
        run = run_report(scenario_commands)
        assert len(run.timeline) == 3
        assert sum(s.score for s in run.ranking) == len(run.timeline)
        assert run.summary.commands_seen == 6
        assert run.summary.commands_decoded == 6
        assert run.summary.hosts == 5
        assert not run.errors

    def test_idempotent(self, scenario_commands):
        first = run_report(scenario_commands)
        second = run_report(scenario_commands)
        assert first.ranking == second.ranking
        assert first.verdicts == second.verdicts

    def test_reused_pipeline_starts_fresh(self):
        pipeline = ReportPipeline()
        commands = [make_command("prefetch", "h1", prefetch_payload("a.exe", "2023-01-01 10:00:00"))]
        first = pipeline.run(commands)
        second = pipeline.run(commands)
        for run in (first, second):
            assert run.summary.commands_seen == 1
            assert run.summary.occurrences_indexed == 1
            assert run.summary.artifacts_indexed == 1
        assert first.summary.run_id != second.summary.run_id


class TestDecodeErrors:
    def test_bad_command_skipped(self):
        commands = [
            make_command("prefetch", "h1", prefetch_payload("a.exe", "2023-01-01 10:00:00"), 1),
            make_command("prefetch", "h2", {"s1": [{"exename": "a.exe"}]}, 2),
            make_command("registry", "h3", registry_payload("Run\\x", "2023-01-01 10:00:00Z"), 3),
        ]
        run = run_report(commands)
        assert run.summary.commands_decoded == 2
        assert run.summary.commands_skipped == 1
        assert len(run.decode_errors) == 1
        error = run.decode_errors[0]
        assert error.code == ErrorCode.DECODE_ERROR
        assert error.context["command_id"] == 2
        assert error.context["host"] == "h2"
        assert set(run.timeline) == {"a.exe", "Run/x"}

    def test_empty_payload_is_not_an_error(self):
        run = run_report([make_command("file", "h1", None)])
        assert run.summary.commands_decoded == 1
        assert not run.errors
        assert len(run.timeline) == 0


class TestTimestampErrors:
    def commands(self):
        return [
            make_command("prefetch", "h1", prefetch_payload("a.exe", "garbage"), 1),
            make_command("prefetch", "h2", prefetch_payload("a.exe", "2023-01-01 10:00:00"), 2),
        ]

    def test_occurrence_dropped(self):
        run = run_report(self.commands())
        assert run.summary.timestamp_errors == 1
        assert [o.host for o in run.timeline["a.exe"]] == ["h2"]
        error = run.timestamp_errors[0]
        assert error.context["identity"] == "a.exe"
        assert error.context["host"] == "h1"

    def test_strict_mode_aborts(self):
        pipeline = ReportPipeline(ReportConfig(strict_timestamps=True))
        with pytest.raises(ParseError):
            pipeline.run(self.commands())
        assert pipeline.result.summary.aborted
        assert pipeline.result.summary.timestamp_errors == 1
        assert pipeline.result.summary.commands_seen == 1


class TestProfileConfig:
    def test_profile_tokens_applied(self):
        command = make_command(
            "file",
            "h1",
            {"s1": [{"file": r"D:\data\svc\tools\nc.exe", "fileinfo": {"lastmodified": "2023-01-01 10:00:00"}}]},
        )
        run = ReportPipeline(ReportConfig(profile_tokens={"svc"})).run([command])
        assert list(run.timeline) == ["USER/tools/nc.exe"]

    def test_modules_reported_include_unconfigured(self):
        run = ReportPipeline(ReportConfig(modules=[ModuleKind.REGISTRY])).run(
            [make_command("prefetch", "h1", prefetch_payload("a.exe", "2023-01-01 10:00:00"))]
        )
        assert run.modules == [ModuleKind.REGISTRY, ModuleKind.PREFETCH]
