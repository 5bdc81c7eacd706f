"""Tests for rl-playground CLI commands."""

import json
from pathlib import Path

import httpx
import pytest
import yaml
from click.testing import CliRunner

from rl_playground.cli.main import cli


@pytest.fixture
def workdir(tmp_path, isolated_config_home, monkeypatch):
    """Run commands from an empty directory with logging switched off."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    config_path = work / "test-config.yaml"
    config_path.write_text(yaml.dump({"logging": {"enabled": False}}))
    return work


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_cli_help(self):
        """Test CLI help output."""
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "play against a learned policy" in result.output
        for command in ("init", "play", "policy", "predict", "trace"):
            assert command in result.output

    def test_missing_config_file(self, workdir):
        result = self.runner.invoke(cli, ["--config", "missing.yaml", "policy"])
        assert result.exit_code == 2

    def test_init_command(self, workdir):
        """Test init command."""
        result = self.runner.invoke(cli, ["init"])

        assert result.exit_code == 0
        assert "initialized" in result.output
        project_dir = workdir / ".rl-playground"
        assert (project_dir / "logs").is_dir()
        assert (project_dir / ".gitignore").read_text() == "logs/\n"
        saved = yaml.safe_load((project_dir / "config.yaml").read_text())
        assert saved["service"]["base_url"] == "http://localhost:8000"

    def test_init_command_force(self, workdir):
        """Test init command with --force flag."""
        assert self.runner.invoke(cli, ["init"]).exit_code == 0

        again = self.runner.invoke(cli, ["init"])
        assert again.exit_code == 0
        assert "already initialized" in again.output

        forced = self.runner.invoke(cli, ["init", "--force"])
        assert forced.exit_code == 0
        assert "already initialized" not in forced.output


class TestPolicyCommands:
    """Test the policy, predict and trace commands."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke(self, fake_service, *args):
        return self.runner.invoke(
            cli,
            ["--config", "test-config.yaml", *args],
            obj={"transport": httpx.MockTransport(fake_service)},
        )

    def test_policy_table(self, workdir, fake_service, make_grid_records):
        fake_service.set_policy(make_grid_records(3, 3, "Left"))

        result = self.invoke(fake_service, "policy")

        assert result.exit_code == 0
        assert "←" in result.output
        assert "🏁" in result.output
        assert "3x3 states" in result.output
        assert fake_service.requests[0].url.path == "/predict_all/Grid"

    def test_policy_for_other_game(self, workdir, fake_service, make_grid_records):
        fake_service.set_policy(make_grid_records(1, 1))
        result = self.invoke(fake_service, "policy", "--game", "TicTacToe")
        assert result.exit_code == 0
        assert fake_service.requests[0].url.path == "/predict_all/TicTacToe"

    def test_policy_unavailable(self, workdir, fake_service):
        fake_service.set_policy({"error": "down"}, status=503)

        result = self.invoke(fake_service, "policy")

        assert result.exit_code == 1
        assert "Policy table unavailable" in result.output

    def test_jagged_policy_unavailable(self, workdir, fake_service):
        fake_service.set_policy(
            [
                [{"position": [0, 0]}, "Up"],
                [{"position": [0, 1]}, "Up"],
                [{"position": [1, 0]}, "Up"],
            ]
        )
        result = self.invoke(fake_service, "policy")
        assert result.exit_code == 1
        assert "Policy table unavailable" in result.output

    def test_empty_policy(self, workdir, fake_service):
        fake_service.set_policy([])
        result = self.invoke(fake_service, "policy")
        assert result.exit_code == 0
        assert "empty policy" in result.output

    def test_predict(self, workdir, fake_service):
        fake_service.queue_action("Right")

        result = self.invoke(fake_service, "predict", "1", "2")

        assert result.exit_code == 0
        assert "Right" in result.output
        state = json.loads(fake_service.requests[0].url.params["state"])
        assert state == {"position": [1, 2], "done": False}

    def test_predict_failure(self, workdir, fake_service):
        fake_service.queue_error(httpx.ConnectError("connection refused"))
        result = self.invoke(fake_service, "predict", "0", "0")
        assert result.exit_code == 1
        assert "Prediction failed" in result.output

    def test_trace(self, workdir, fake_service, make_grid_records):
        fake_service.set_policy(make_grid_records(3, 3, "Up"))

        result = self.invoke(fake_service, "trace", "2", "1")

        assert result.exit_code == 0
        assert "reached the checkpoint" in result.output

    def test_trace_off_grid(self, workdir, fake_service, make_grid_records):
        fake_service.set_policy(make_grid_records(3, 3, "Up"))
        result = self.invoke(fake_service, "trace", "0", "0")
        assert result.exit_code == 0
        assert "walked off the grid" in result.output

    def test_trace_start_outside_table(self, workdir, fake_service, make_grid_records):
        fake_service.set_policy(make_grid_records(3, 3))
        result = self.invoke(fake_service, "trace", "5", "5")
        assert result.exit_code == 2
        assert "outside" in result.output

    def test_policy_logged(self, workdir, fake_service, make_grid_records):
        config_path = workdir / "logged.yaml"
        config_path.write_text(
            yaml.dump({"logging": {"enabled": True, "output_dir": str(workdir / "logs")}})
        )
        fake_service.set_policy(make_grid_records(2, 2))

        result = self.runner.invoke(
            cli,
            ["--config", str(config_path), "policy"],
            obj={"transport": httpx.MockTransport(fake_service)},
        )

        assert result.exit_code == 0
        log_files = list(Path(workdir / "logs").glob("sessions/*/activity.jsonl"))
        assert len(log_files) == 1
        events = [json.loads(line) for line in log_files[0].read_text().splitlines()]
        assert events[0]["event_type"] == "policy_fetched"
        assert events[0]["data"]["rows"] == 2


class TestPlayCommand:
    """Test the interactive play loop."""

    def setup_method(self):
        self.runner = CliRunner()

    def play(self, fake_service, keys):
        return self.runner.invoke(
            cli,
            ["--config", "test-config.yaml", "play"],
            obj={"transport": httpx.MockTransport(fake_service)},
            input=keys,
        )

    def test_move_and_quit(self, workdir, fake_service):
        fake_service.queue_action([1, 1])

        result = self.play(fake_service, "0 0\nq\n")

        assert result.exit_code == 0
        assert len(fake_service.requests) == 1
        assert "Your move" in result.output

    def test_invalid_input(self, workdir, fake_service):
        result = self.play(fake_service, "hello\nq\n")
        assert result.exit_code == 0
        assert "Enter a move as" in result.output
        assert fake_service.requests == []

    def test_agent_unavailable_then_quit(self, workdir, fake_service):
        fake_service.queue_action({"error": "boom"}, status=500)

        result = self.play(fake_service, "0 0\nq\n")

        assert result.exit_code == 0
        assert "Agent unavailable" in result.output

    def test_agent_retry(self, workdir, fake_service):
        fake_service.queue_error(httpx.ConnectError("connection refused"))
        fake_service.queue_action([1, 1])

        result = self.play(fake_service, "0 0\nr\nq\n")

        assert result.exit_code == 0
        assert len(fake_service.requests) == 2
        assert "Your move" in result.output

    def test_play_to_win(self, workdir, fake_service):
        fake_service.queue_action([1, 0])
        fake_service.queue_action([1, 1])

        result = self.play(fake_service, "0 0\n0 1\n0 2\nn\n")

        assert result.exit_code == 0
        assert "Game over: X wins" in result.output
        assert len(fake_service.requests) == 2
