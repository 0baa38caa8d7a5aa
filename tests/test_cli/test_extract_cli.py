"""Tests for the extract and check-patterns CLI commands."""

import json

import pytest
from click.testing import CliRunner

from src.cli import main


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("ENVIRONMENT", "development")
    for name in ("ENABLE_PREVIEW", "SKIP_FROM_TO_MERGE", "EXTENDED_TYPES", "CALENDAR_MODE"):
        monkeypatch.delenv(f"MERGE_{name}", raising=False)
    return CliRunner()


@pytest.fixture
def range_candidates(tmp_path):
    """Candidate directory with a single "from X to Y" time range pattern."""
    (tmp_path / "ranges.jsonl").write_text(
        json.dumps({"category": "timerange", "pattern": r"\bfrom\s+\d+pm\s+to\s+\d+pm\b"})
        + "\n",
        encoding="utf-8",
    )
    return tmp_path


# ── extract ──────────────────────────────────────────────


class TestExtract:
    """Tests for `extract` command."""

    def test_table_output(self, runner):
        result = runner.invoke(main, ["extract", "meeting after 3pm"])

        assert result.exit_code == 0
        assert "after 3pm" in result.stdout
        assert "time" in result.stdout

    def test_json_output(self, runner):
        result = runner.invoke(main, ["extract", "--json", "move 3pm appointment to 4"])

        assert result.exit_code == 0
        spans = json.loads(result.stdout)
        assert [(s["start"], s["text"], s["category"]) for s in spans] == [
            (5, "3pm", "time"),
            (24, "4", "time"),
        ]

    def test_no_spans(self, runner):
        result = runner.invoke(main, ["extract", "nothing to see here"])

        assert result.exit_code == 0
        assert "No date/time spans found" in result.stdout

    def test_reference(self, runner):
        result = runner.invoke(
            main, ["extract", "--reference", "2024-03-15", "tomorrow at 3pm"]
        )

        assert result.exit_code == 0
        assert "tomorrow at 3pm" in result.stdout

    def test_invalid_reference(self, runner):
        result = runner.invoke(main, ["extract", "--reference", "next tuesday", "3pm"])
        assert result.exit_code != 0

    def test_skip_from_to(self, runner, range_candidates):
        args = ["extract", "--candidates-dir", str(range_candidates), "from 3pm to 5pm"]

        kept = runner.invoke(main, args)
        skipped = runner.invoke(main, ["extract", "--skip-from-to", *args[1:]])

        assert "from 3pm to 5pm" in kept.stdout
        assert "No date/time spans found" in skipped.stdout

    def test_env_flag_applies(self, runner, range_candidates, monkeypatch):
        monkeypatch.setenv("MERGE_SKIP_FROM_TO_MERGE", "true")

        result = runner.invoke(
            main, ["extract", "--candidates-dir", str(range_candidates), "from 3pm to 5pm"]
        )

        assert "No date/time spans found" in result.stdout

    def test_preview_superfluous(self, runner):
        result = runner.invoke(
            main,
            ["extract", "--preview", "--superfluous", "um", "--json", "call um at 3pm"],
        )

        assert result.exit_code == 0
        spans = json.loads(result.stdout)
        assert [(s["start"], s["text"]) for s in spans] == [(11, "3pm")]


# ── check-patterns ───────────────────────────────────────


class TestCheckPatterns:
    """Tests for `check-patterns` command."""

    def test_bundled_patterns(self, runner):
        result = runner.invoke(main, ["check-patterns"])

        assert result.exit_code == 0
        assert "Pattern Check Results" in result.stdout
        assert "All patterns compiled successfully!" in result.stdout

    def test_debug_flag(self, runner):
        result = runner.invoke(main, ["--debug", "check-patterns"])
        assert result.exit_code == 0

    def test_empty_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["check-patterns", "--candidates-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "No candidate patterns found" in result.stdout

    def test_invalid_pattern(self, runner, tmp_path):
        (tmp_path / "bad.jsonl").write_text(
            json.dumps({"category": "date", "pattern": "[oops"}) + "\n",
            encoding="utf-8",
        )

        result = runner.invoke(main, ["check-patterns", "--candidates-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "Invalid pattern 'bad.jsonl:1'" in result.stdout


# ── stream ───────────────────────────────────────────────


class TestStream:
    """Tests for `stream` command."""

    def test_one_json_line_per_input_line(self, runner):
        result = runner.invoke(
            main,
            ["stream", "--reference", "2024-03-15"],
            input="meeting after 3pm\n\nmove 3pm appointment to 4\n",
        )

        assert result.exit_code == 0
        lines = [json.loads(line) for line in result.stdout.splitlines()]
        assert len(lines) == 3
        assert [s["text"] for s in lines[0]] == ["after 3pm"]
        assert lines[1] == []
        assert [s["start"] for s in lines[2]] == [5, 24]

    def test_reads_file(self, runner, tmp_path):
        path = tmp_path / "texts.txt"
        path.write_text("tomorrow at 3pm\n", encoding="utf-8")

        result = runner.invoke(main, ["stream", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.stdout)[0]["category"] == "datetime"

    def test_metrics_server(self, runner, monkeypatch):
        ports = []
        monkeypatch.setenv("METRICS_PORT", "9123")
        monkeypatch.setattr(
            "src.observability.metrics.start_http_server",
            lambda port, registry: ports.append(port),
        )

        default = runner.invoke(main, ["stream", "--metrics"], input="3pm\n")
        explicit = runner.invoke(
            main, ["stream", "--metrics", "--metrics-port", "9200"], input="3pm\n"
        )

        assert default.exit_code == 0
        assert explicit.exit_code == 0
        assert ports == [9123, 9200]

    def test_no_metrics_server_by_default(self, runner, monkeypatch):
        ports = []
        monkeypatch.setattr(
            "src.observability.metrics.start_http_server",
            lambda port, registry: ports.append(port),
        )

        result = runner.invoke(main, ["stream"], input="3pm\n")

        assert result.exit_code == 0
        assert ports == []
