"""
Tests for the askterm CLI.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from askterm import __version__
from askterm.cli import app
from askterm.core.config import AsktermConfig
from askterm.core.launch import LaunchSpec, NoTerminalAvailableError
from askterm.core.services import EmptyPromptError
from askterm.core.session import SessionOutcome, SessionResult

runner = CliRunner()


def answered(answer: str = "yes") -> SessionResult:
    return SessionResult(answer, SessionOutcome.ANSWERED, "abc123")


def unanswered() -> SessionResult:
    return SessionResult("", SessionOutcome.INPUT_TIMEOUT, "abc123", detail="No answer within 5s")


@pytest.fixture
def service():
    """A stand-in InputService returned by the CLI's loader."""
    fake = MagicMock()
    fake.ask = AsyncMock(return_value=answered())
    fake.config = AsktermConfig(terminal="/usr/bin/kitty")
    with patch("askterm.cli._load_service", return_value=fake):
        yield fake


class TestAsk:
    """Tests for `askterm ask`."""

    def test_prints_answer(self, service):
        result = runner.invoke(app, ["ask", "Deploy?"])
        assert result.exit_code == 0
        assert "yes" in result.output

    def test_passes_options(self, service):
        result = runner.invoke(
            app,
            ["ask", "Deploy?", "-o", "yes", "-o", "no", "-p", "web", "-t", "30", "--no-countdown"],
        )
        assert result.exit_code == 0
        service.ask.assert_awaited_once_with(
            "Deploy?",
            project_name="web",
            predefined_options=["yes", "no"],
            timeout_seconds=30,
            show_countdown=False,
        )

    def test_countdown_defaults_to_config(self, service):
        runner.invoke(app, ["ask", "Deploy?"])
        assert service.ask.await_args.kwargs["show_countdown"] is None

    def test_no_answer_exits_1(self, service):
        service.ask.return_value = unanswered()
        result = runner.invoke(app, ["ask", "Deploy?"])
        assert result.exit_code == 1
        assert "input_timeout" in result.output

    def test_json_output(self, service):
        service.ask.return_value = unanswered()
        result = runner.invoke(app, ["ask", "Deploy?", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output.strip().splitlines()[-1])
        assert data == {
            "answer": "",
            "outcome": "input_timeout",
            "sessionId": "abc123",
            "detail": "No answer within 5s",
        }

    def test_invalid_timeout(self, service):
        result = runner.invoke(app, ["ask", "Deploy?", "--timeout", "0"])
        assert result.exit_code == 2
        service.ask.assert_not_called()

    def test_empty_prompt(self, service):
        service.ask.side_effect = EmptyPromptError()
        result = runner.invoke(app, ["ask", " "])
        assert result.exit_code == 2
        assert "Prompt text must not be empty" in result.output


class TestTerminal:
    """Tests for `askterm terminal`."""

    def test_shows_launch_target(self, service):
        service.describe_launch_target.return_value = LaunchSpec(
            "/usr/bin/kitty", ("--title", "Interactive Input", "--", "sh", "-c", "x")
        )
        result = runner.invoke(app, ["terminal"])
        assert result.exit_code == 0
        assert "/usr/bin/kitty" in result.output
        assert "Through shell" in result.output

    def test_no_terminal(self, service):
        service.describe_launch_target.side_effect = NoTerminalAvailableError("linux")
        result = runner.invoke(app, ["terminal"])
        assert result.exit_code == 1
        assert "No suitable terminal" in result.output

    def test_invalid_config(self, clean_env):
        """Test a config file that fails validation shows an error panel."""
        (clean_env / ".askterm.json").write_text(json.dumps({"default_timeout": 0}))
        result = runner.invoke(app, ["terminal"])
        assert result.exit_code == 1
        assert "Error in terminal" in result.output
        assert "default_timeout" in result.output


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"askterm {__version__}"
