"""Tests for the specwright command line."""

import json
import logging

import pytest
from click.testing import CliRunner

from specwright.cli import cli

PM_QUESTIONS = "questions/pm_questions.json"
PRD = "documents/prd.md"


@pytest.fixture(autouse=True)
def _reset_logging():  # noqa: ANN202
    yield
    logger = logging.getLogger("specwright")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def run(tmp_path):  # noqa: ANN001, ANN201
    """Invoke the CLI against a temporary projects root."""
    runner = CliRunner()

    def _run(*args: str):  # noqa: ANN202
        return runner.invoke(cli, ["--projects-root", str(tmp_path), *args])

    return _run


@pytest.fixture
def write_artifact(tmp_path):  # noqa: ANN001, ANN201
    def _write(relative: str) -> None:
        path = tmp_path / "042" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("content")

    return _write


class TestPhaseCommands:
    """Tests for init/status/begin/complete."""

    def test_init_creates_record(self, run, tmp_path) -> None:  # noqa: ANN001
        """init writes a fresh record with the chosen settings."""
        result = run("init", "042", "--document-length", "brief")

        assert result.exit_code == 0, result.output
        assert "Initialized 042 at pm-questions-generate" in result.output
        assert (tmp_path / "042" / "project_status.json").is_file()

    def test_status_of_fresh_project(self, run) -> None:  # noqa: ANN001
        """status shows the current phase and progress."""
        result = run("status", "042")

        assert result.exit_code == 0, result.output
        assert "Current phase: pm-questions-generate" in result.output
        assert "Progress: 0/12 (0%)" in result.output

    def test_begin_phase(self, run) -> None:  # noqa: ANN001
        """begin marks the phase as started."""
        result = run("begin", "042", "pm", "questions-generate")

        assert result.exit_code == 0, result.output
        assert "pm-questions-generate: ai-working" in result.output

    def test_complete_without_output_fails(self, run) -> None:  # noqa: ANN001
        """Completing without the output file exits 1."""
        result = run("complete", "042", "pm", "questions-generate")

        assert result.exit_code == 1
        assert "cannot complete" in result.output

    def test_human_phase_needs_confirm_flag(self, run, write_artifact) -> None:  # noqa: ANN001
        """Human phases complete only with --confirm."""
        write_artifact(PM_QUESTIONS)
        run("complete", "042", "pm", "questions-generate")

        refused = run("complete", "042", "pm", "questions-answer")
        confirmed = run("complete", "042", "pm", "questions-answer", "--confirm")

        assert refused.exit_code == 1
        assert confirmed.exit_code == 0, confirmed.output
        assert "now at pm-prd-generate" in confirmed.output

    def test_status_waits_for_user(self, run, write_artifact) -> None:  # noqa: ANN001
        """status tells when the user has to act."""
        write_artifact(PM_QUESTIONS)
        run("complete", "042", "pm", "questions-generate")

        result = run("status", "042")

        assert "Waiting for user input" in result.output

    def test_out_of_order_fails(self, run) -> None:  # noqa: ANN001
        """Out-of-order completion exits 1."""
        result = run("complete", "042", "ux", "questions-generate")

        assert result.exit_code == 1

    def test_unknown_agent_rejected(self, run) -> None:  # noqa: ANN001
        """click rejects unknown agents with a usage error."""
        result = run("begin", "042", "qa", "questions-generate")

        assert result.exit_code == 2


class TestValidationCommands:
    """Tests for validate/recover/drift."""

    def test_validate_recorded_phase(self, run) -> None:  # noqa: ANN001
        """The recorded phase of a fresh project is valid."""
        result = run("validate", "042")

        assert result.exit_code == 0, result.output

    def test_validate_unsupported_claim(self, run) -> None:  # noqa: ANN001
        """An unsupported claim exits 1 with a suggestion."""
        result = run("validate", "042", "--phase", "pm-prd-review")

        assert result.exit_code == 1
        assert "Suggested phase: pm-questions-generate" in result.output

    def test_validate_unknown_phase(self, run) -> None:  # noqa: ANN001
        """Unknown phase names exit 1."""
        result = run("validate", "042", "--phase", "pm-nothing")

        assert result.exit_code == 1

    def test_recover_after_file_removed(self, run, write_artifact, tmp_path) -> None:  # noqa: ANN001
        """recover rewinds once, then reports a consistent record."""
        write_artifact(PM_QUESTIONS)
        run("complete", "042", "pm", "questions-generate")
        run("complete", "042", "pm", "questions-answer", "--confirm")
        write_artifact(PRD)
        run("complete", "042", "pm", "prd-generate")
        (tmp_path / "042" / PRD).unlink()

        result = run("recover", "042")

        assert result.exit_code == 0, result.output
        assert "recovered from pm-prd-review to pm-prd-generate" in result.output
        assert "is consistent at pm-prd-generate" in run("recover", "042").output

    def test_drift_clean_project(self, run) -> None:  # noqa: ANN001
        """A fresh project has no drift."""
        result = run("drift", "042")

        assert "No drift" in result.output

    def test_recover_edited_record(
        self, run, write_artifact, tmp_path  # noqa: ANN001
    ) -> None:
        """A current phase edited past unfinished phases is rewound."""
        run("init", "042")
        write_artifact(PM_QUESTIONS)
        write_artifact(PRD)
        path = tmp_path / "042" / "project_status.json"
        data = json.loads(path.read_text())
        data["currentPhase"] = "pm-prd-review"
        path.write_text(json.dumps(data))

        result = run("recover", "042")

        assert result.exit_code == 0, result.output
        assert (
            "recovered from pm-prd-review to pm-questions-generate" in result.output
        )
        assert run("complete", "042", "pm", "prd-review", "--confirm").exit_code == 1


class TestPromptCommands:
    """Tests for workflows/prompt."""

    def test_list_workflows(self, run) -> None:  # noqa: ANN001
        """workflows lists the catalog."""
        result = run("workflows")

        assert result.exit_code == 0
        assert "pm_analysis" in result.output
        assert "breakdown" in result.output

    def test_prompt_for_named_workflow(self, run, tmp_path) -> None:  # noqa: ANN001
        """A named workflow prompt uses the project directory."""
        result = run("prompt", "042", "Add OAuth login", "--workflow", "pm_analysis")

        assert result.exit_code == 0, result.output
        assert "USER REQUEST:\nAdd OAuth login\n" in result.output
        assert f"1. {tmp_path.resolve()}/042/documents/prd.md" in result.output

    def test_prompt_for_current_phase(self, run) -> None:  # noqa: ANN001
        """Without --workflow the current phase decides the prompt."""
        result = run("prompt", "042", "Add OAuth login")

        assert result.exit_code == 0, result.output
        assert result.output.startswith(
            "@specwright/agents/product_manager/questioning_prompt.md\n"
        )

    def test_prompt_for_human_phase_fails(self, run, write_artifact) -> None:  # noqa: ANN001
        """There is no prompt while the user has to act."""
        write_artifact(PM_QUESTIONS)
        run("complete", "042", "pm", "questions-generate")

        result = run("prompt", "042", "req")

        assert result.exit_code == 1

    def test_composite_workflow_fails(self, run) -> None:  # noqa: ANN001
        """Composite workflows cannot be prompted directly."""
        result = run("prompt", "042", "req", "--workflow", "spec")

        assert result.exit_code == 1
        assert "multi-phase" in result.output


class TestSessionCommands:
    """Tests for the session group."""

    def test_save_and_get(self, run) -> None:  # noqa: ANN001
        """A saved session id can be read back."""
        saved = run("session", "save", "042", "pm", "abc-123")
        fetched = run("session", "get", "042", "pm")

        assert saved.exit_code == 0, saved.output
        assert fetched.output.strip() == "abc-123"

    def test_get_missing(self, run) -> None:  # noqa: ANN001
        """Missing sessions exit 1."""
        result = run("session", "get", "042", "ux")

        assert result.exit_code == 1
        assert "No session for ux" in result.output

    def test_clear_one_and_all(self, run) -> None:  # noqa: ANN001
        """Sessions can be cleared per agent or all at once."""
        run("session", "save", "042", "pm", "abc-123")
        run("session", "save", "042", "ux", "def-456")

        run("session", "clear", "042", "pm")
        assert run("session", "get", "042", "pm").exit_code == 1
        assert run("session", "get", "042", "ux").exit_code == 0

        run("session", "clear", "042")
        assert run("session", "get", "042", "ux").exit_code == 1


class TestConfiguration:
    """Tests for global options."""

    @pytest.mark.parametrize("project_id", ["../escape", "a/b"])
    def test_project_id_must_stay_under_root(
        self, run, tmp_path, project_id  # noqa: ANN001
    ) -> None:
        """Ids that would leave the projects root are rejected."""
        result = run("init", project_id)

        assert result.exit_code == 1
        assert "Invalid project id" in result.output
        assert not (tmp_path.parent / "escape").exists()
        assert list(tmp_path.iterdir()) == []

    def test_missing_config_file(self, tmp_path) -> None:  # noqa: ANN001
        """An explicit missing config file exits 1."""
        result = CliRunner().invoke(
            cli, ["--config", str(tmp_path / "nope.json"), "workflows"]
        )

        assert result.exit_code == 1

    def test_log_file_receives_debug(self, run, tmp_path) -> None:  # noqa: ANN001
        """--log-file captures debug records."""
        log_file = tmp_path / "logs" / "specwright.log"

        run("--log-file", str(log_file), "init", "042")

        assert "Initialized status for project 042" in log_file.read_text()
