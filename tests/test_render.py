"""Tests for report renderers."""

import csv
import io

import pytest

from conftest import file_payload, make_command, mig_row, prefetch_payload, registry_payload
from zerotrace.core.config import ReportConfig
from zerotrace.core.errors import RenderError
from zerotrace.core.pipeline import ReportPipeline
from zerotrace.render import DETAIL_COLUMNS, detail_rows, render, render_csv, render_html, render_text
from zerotrace.render.detail import detail_row
from zerotrace.sources import expand_record


@pytest.fixture
def run(scenario_commands):
    return ReportPipeline(ReportConfig(action_id=7)).run(scenario_commands)


class TestTextReport:
    def test_sections(self, run):
        text = render_text(run)
        assert "Module: prefetch" in text
        assert "Agent: host-c" in text
        assert "USER/Downloads/evil.exe" in text
        assert "Patient Zero" in text
        assert text.index("Module: file") < text.index("Module: registry") < text.index("Module: prefetch")

    def test_empty_run(self):
        text = render_text(ReportPipeline().run([]))
        assert "No artifacts indexed." in text

    def test_stdout_mode(self, run):
        stream = io.StringIO()
        assert render(run, mode="stdout", stream=stream) is None
        assert stream.getvalue() == render_text(run)


class TestCsvReport:
    def test_one_row_per_record(self, run):
        rows = list(csv.DictReader(io.StringIO(render_csv(run))))
        assert len(rows) == len(run.records)
        malware = [r for r in rows if r["artifact"] == "malware.exe"]
        assert {r["host"] for r in malware} == {"host-a", "host-b"}
        assert malware[0]["module"] == "prefetch"
        assert malware[0]["action_id"] == "7"

    def test_header_lists_detail_columns(self, run):
        header = render_csv(run).splitlines()[0]
        assert header.split(",") == DETAIL_COLUMNS


class TestDetailRows:
    def test_file_descriptor(self):
        sha = "B" * 64
        command = make_command("file", "h1", file_payload("/tmp/evil", "2023-01-01 10:00:00 +0000 UTC", sha256=sha))
        row = detail_rows(ReportPipeline().run([command]))[0]
        assert row["location"] == "/tmp/evil"
        assert row["size"] == 1024
        assert row["mode"] == "-rw-r--r--"
        assert row["sha256"] == "b" * 64
        assert row["timestamp"] == "2023-01-01T10:00:00+00:00"
        assert row["reported_time"] == "2023-01-01 10:00:00 +0000 UTC"
        assert row["dll_name"] is None

    def test_registry_location_includes_hive(self):
        command = make_command("registry", "h1", registry_payload(r"Software\Run\evil", "2023-01-01 10:00:00Z"))
        row = detail_rows(ReportPipeline().run([command]))[0]
        assert row["location"] == "HKLM\\Software\\Run\\evil"
        assert row["artifact"] == "Software/Run/evil"
        assert row["size"] is None

    def test_mig_command_metadata(self):
        row_data = mig_row(30, "ws-01", ["prefetch"], [prefetch_payload("a.exe", "2023-01-01 10:00:00", runcount=4)])
        run = ReportPipeline().run(expand_record(row_data))
        row = detail_row(run.records[0])
        assert row["location"] == "a.exe"
        assert row["run_count"] == "4"
        assert row["threat_level"] == "high"
        assert row["threat_family"] == "malware"
        assert row["agent_version"] == "20230101"
        assert row["found_anything"] is True
        assert row["success"] is True
        assert row["command_id"] == 30

    def test_grouped_by_module(self, run):
        modules = [row["module"] for row in detail_rows(run)]
        assert modules == sorted(modules, key=[m.value for m in run.modules].index)


class TestHtmlReport:
    def test_tabs_and_charts(self, run):
        html = render_html(run)
        for tab in ["ActionSummary", "Artifacts", "PatientZero", "Hosts", "Statistics"]:
            assert f'id="{tab}"' in html
        assert "drawTimeline" in html
        assert "host-a" in html

    def test_values_escaped(self, scenario_commands):
        run = ReportPipeline().run(scenario_commands)
        run.ranking[0] = run.ranking[0].model_copy(update={"host": "<script>x</script>"})
        html = render_html(run)
        assert "&lt;script&gt;x&lt;/script&gt;" in html


class TestFileOutput:
    @pytest.mark.parametrize("mode,suffix", [("file", ".txt"), ("csv", ".csv"), ("timeline", ".html")])
    def test_named_after_action(self, run, tmp_path, mode, suffix):
        path = render(run, mode=mode, output_dir=tmp_path / "out")
        assert path == tmp_path / "out" / f"Action-7{suffix}"
        assert path.read_text(encoding="utf-8")

    def test_all_actions_name(self, scenario_commands, tmp_path):
        run = ReportPipeline(ReportConfig(output_mode="csv", output_dir=tmp_path)).run(scenario_commands)
        assert render(run) == tmp_path / "All-Actions.csv"

    def test_unwritable(self, run, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(RenderError):
            render(run, mode="file", output_dir=blocker)
