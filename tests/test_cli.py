"""Tests for kubequest_sim.cli: Click command interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from kubequest_sim.cli import main

FIX_COMMAND = "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://db:5432/app"


@pytest.fixture(autouse=True)
def _no_delays(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KUBEQUEST_START_DELAY_SECONDS", "0")
    monkeypatch.setenv("KUBEQUEST_COMPLETION_DELAY_SECONDS", "0")


# ---------------------------------------------------------------------------
# --version / --help
# ---------------------------------------------------------------------------


class TestTopLevel:
    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_subcommands(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for name in ("scenarios", "show", "run", "play"):
            assert name in result.output

    def test_invalid_log_level_rejected(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--log-level", "LOUD", "scenarios"])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# scenarios / show
# ---------------------------------------------------------------------------


class TestScenariosCommand:
    def test_lists_catalog(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["scenarios"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0].startswith("ID")
        assert "crashloop-1" in result.output

    def test_filters_by_category(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["scenarios", "--category", "networking", "--json-output"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data
        assert all(item["category"] == "networking" for item in data)

    def test_difficulty_case_insensitive(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["scenarios", "--difficulty", "beginner", "--json-output"])
        assert result.exit_code == 0
        assert {item["difficulty"] for item in json.loads(result.output)} == {"Beginner"}

    def test_no_matches(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["scenarios", "--category", "astrology"])
        assert result.exit_code == 0
        assert "No scenarios found." in result.output


class TestShowCommand:
    def test_shows_details(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "crashloop-1"])
        assert result.exit_code == 0
        assert "Name       : CrashLoopBackOff Mystery" in result.output
        assert "Hints available: 2" in result.output

    def test_json_output(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "crashloop-1", "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["id"] == "crashloop-1"

    def test_unknown_scenario(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "nope"])
        assert result.exit_code == 1
        assert "unknown scenario 'nope'" in result.output


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_requires_commands(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1"])
        assert result.exit_code == 2
        assert "Provide at least one" in result.output

    def test_unknown_scenario(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["run", "nope", "-c", "kubectl get pods"])
        assert result.exit_code == 1

    def test_prints_commands_and_status(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "-c", "kubectl get pods"])
        assert result.exit_code == 0
        assert "$ kubectl get pods" in result.output
        assert "CrashLoopBackOff" in result.output
        assert "Status   : running" in result.output
        assert "Progress : 0%" in result.output

    def test_fix_completes_scenario(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["run", "crashloop-1", "-c", "kubectl get pods", "-c", FIX_COMMAND, "--json-output"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["scenario"] == "crashloop-1"
        assert payload["status"] == "stopped"
        assert payload["progress"] == 100
        assert payload["commands_executed"] == 2
        assert payload["results"][-1]["output"].startswith("SCENARIO COMPLETED!")

    def test_yaml_script(self, tmp_path: Path) -> None:
        script = tmp_path / "fix.yaml"
        script.write_text(f"commands:\n  - kubectl get pods\n  - {FIX_COMMAND}\n", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "--script", str(script), "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["progress"] == 100

    def test_json_script(self, tmp_path: Path) -> None:
        script = tmp_path / "steps.json"
        script.write_text(json.dumps(["kubectl get nodes"]), encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "--script", str(script), "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["commands_executed"] == 1

    def test_text_script_skips_comments(self, tmp_path: Path) -> None:
        script = tmp_path / "steps.txt"
        script.write_text("# look around\n\nkubectl get pods\nkubectl get events\n", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "--script", str(script), "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["commands_executed"] == 2

    def test_invalid_script_exits_nonzero(self, tmp_path: Path) -> None:
        script = tmp_path / "bad.json"
        script.write_text(json.dumps({"commands": [1, 2]}), encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "--script", str(script)])
        assert result.exit_code == 1
        assert "Error loading script" in result.output

    def test_missing_script_exits_nonzero(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["run", "crashloop-1", "--script", "/nonexistent/steps.txt"])
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# play
# ---------------------------------------------------------------------------


class TestPlayCommand:
    def test_quit_immediately(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["play", "crashloop-1"], input=":quit\n")
        assert result.exit_code == 0
        assert 'Scenario "CrashLoopBackOff Mystery" loaded successfully!' in result.output

    def test_hint_and_status(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["play", "crashloop-1"], input=":hint\n:status\n:quit\n")
        assert result.exit_code == 0
        assert "Hint: Check the pod logs to see what error is causing the crash" in result.output
        assert "Hints    : 1" in result.output

    def test_fix_posts_completion(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["play", "crashloop-1"], input=f"kubectl get pods\n{FIX_COMMAND}\n:progress\n:quit\n"
        )
        assert result.exit_code == 0
        assert "SCENARIO COMPLETED!" in result.output
        assert "crash-loop-master" in result.output

    def test_resume_while_running_reports_error(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["play", "crashloop-1"], input=":resume\n:quit\n")
        assert result.exit_code == 0
        assert "Cannot resume while simulation is running" in result.output

    def test_end_of_input_exits(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["play", "crashloop-1"], input="kubectl get nodes\n")
        assert result.exit_code == 0
        assert "worker-node-1" in result.output
