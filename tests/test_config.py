"""Tests for rl-playground configuration system."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from rl_playground.board import GameKind, Mark
from rl_playground.config.loader import get_config_paths, load_config, save_config
from rl_playground.config.models import (
    LoggingConfig,
    PlayConfig,
    PlaygroundConfig,
    ServiceConfig,
    _resolve_env_vars_recursive,
)
from rl_playground.exceptions import ConfigurationError


def write_yaml(path: Path, data) -> Path:
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


def load_only(tmp_path: Path, config_path: Path) -> PlaygroundConfig:
    """Load a single explicit file with no global or project layers."""
    return load_config(
        config_path=config_path,
        global_config_path=tmp_path / "no-global.yaml",
        project_config_path=tmp_path / "no-project.yaml",
    )


class TestConfigModels:
    """Test configuration model validation."""

    def test_default_config(self):
        """Test creating default configuration."""
        config = PlaygroundConfig()

        assert config.service.base_url == "http://localhost:8000"
        assert config.service.action_path == "/predict/{game}"
        assert config.service.policy_path == "/predict_all/{game}"
        assert config.service.timeout == 10.0
        assert config.play.human_mark == Mark.X
        assert config.play.policy_game == GameKind.GRID
        assert config.logging.enabled is True
        assert config.logging.level == "INFO"

    def test_service_config_validation(self):
        """Test service configuration validation."""
        config = ServiceConfig(base_url="https://agent.example.com/", timeout=2.5)
        assert config.base_url == "https://agent.example.com"
        assert config.timeout == 2.5

        with pytest.raises(ValueError, match="base_url must start with"):
            ServiceConfig(base_url="agent.example.com")

        with pytest.raises(ValueError, match="timeout must be positive"):
            ServiceConfig(timeout=0)

    def test_path_templates(self):
        """Test path template validation."""
        config = ServiceConfig(policy_path="/predict_all")
        assert config.policy_path == "/predict_all"

        with pytest.raises(ValueError, match="must start with"):
            ServiceConfig(action_path="predict/{game}")

        with pytest.raises(ValueError, match="Unknown placeholder"):
            ServiceConfig(action_path="/predict/{game}/{state}")

    def test_play_config_validation(self):
        """Test play configuration validation."""
        config = PlayConfig(policy_game="TicTacToe", trace_max_steps=5)
        assert config.policy_game == GameKind.TIC_TAC_TOE
        assert config.trace_max_steps == 5

        with pytest.raises(ValueError, match="human_mark must be X"):
            PlayConfig(human_mark="O")

        with pytest.raises(ValueError, match="trace_max_steps must be at least 1"):
            PlayConfig(trace_max_steps=0)

    def test_logging_config_validation(self):
        """Test logging configuration validation."""
        config = LoggingConfig(level="debug")
        assert config.level == "DEBUG"

        with pytest.raises(ValueError, match="level must be one of"):
            LoggingConfig(level="VERBOSE")

    def test_env_var_resolution(self, monkeypatch):
        """Test environment variable resolution."""
        monkeypatch.setenv("TEST_AGENT_URL", "http://agent.test:9000")

        resolved = _resolve_env_vars_recursive(
            {"service": {"base_url": "${TEST_AGENT_URL}"}, "paths": ["${TEST_AGENT_URL}/x"]}
        )

        assert resolved["service"]["base_url"] == "http://agent.test:9000"
        assert resolved["paths"] == ["http://agent.test:9000/x"]

    def test_env_var_with_defaults(self, monkeypatch):
        """Test environment variable resolution with default values."""
        monkeypatch.delenv("NONEXISTENT_AGENT_URL", raising=False)
        config = PlaygroundConfig(
            service={"base_url": "${NONEXISTENT_AGENT_URL:http://fallback:8000}"}
        )

        resolved = config.resolve_env_vars()
        assert resolved.service.base_url == "http://fallback:8000"


class TestConfigLoader:
    """Test configuration loading functionality."""

    def test_defaults_without_files(self, tmp_path):
        config = load_config(
            global_config_path=tmp_path / "missing-global.yaml",
            project_config_path=tmp_path / "missing-project.yaml",
        )
        assert config == PlaygroundConfig()

    def test_save_and_load_config(self, tmp_path):
        """Test saving and loading configuration."""
        config_path = tmp_path / "config.yaml"
        original = PlaygroundConfig(
            service={"base_url": "http://agent:9000", "timeout": 3},
            logging={"level": "DEBUG", "enabled": False},
        )

        save_config(original, config_path)
        assert config_path.exists()

        with patch(
            "rl_playground.config.loader._get_project_config_path", return_value=config_path
        ):
            loaded = load_config(global_config_path=tmp_path / "none.yaml")

        assert loaded.service.base_url == "http://agent:9000"
        assert loaded.service.timeout == 3.0
        assert loaded.logging.level == "DEBUG"
        assert loaded.logging.enabled is False

    def test_config_merging(self, tmp_path):
        """Test configuration merging from multiple sources."""
        global_path = write_yaml(
            tmp_path / "global.yaml",
            {
                "service": {"base_url": "http://global:8000", "timeout": 5},
                "logging": {"level": "WARN"},
            },
        )
        project_path = write_yaml(
            tmp_path / "project.yaml",
            {"service": {"timeout": 20}, "play": {"trace_max_steps": 7}},
        )
        explicit_path = write_yaml(tmp_path / "explicit.yaml", {"logging": {"level": "ERROR"}})

        config = load_config(
            config_path=explicit_path,
            global_config_path=global_path,
            project_config_path=project_path,
        )

        assert config.service.base_url == "http://global:8000"
        assert config.service.timeout == 20.0
        assert config.play.trace_max_steps == 7
        assert config.logging.level == "ERROR"

    def test_global_config_from_xdg(self, tmp_path, isolated_config_home, monkeypatch):
        config_dir = isolated_config_home / "rl-playground"
        config_dir.mkdir()
        write_yaml(config_dir / "config.yaml", {"service": {"base_url": "http://xdg:1"}})
        monkeypatch.chdir(tmp_path)

        config = load_config()
        assert config.service.base_url == "http://xdg:1"

    def test_project_config_found_in_parent(self, tmp_path, isolated_config_home, monkeypatch):
        project_dir = tmp_path / ".rl-playground"
        project_dir.mkdir()
        write_yaml(project_dir / "config.yaml", {"play": {"trace_max_steps": 3}})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_config().play.trace_max_steps == 3
        assert get_config_paths()["project"] == project_dir / "config.yaml"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(
                config_path=tmp_path / "nope.yaml",
                global_config_path=tmp_path / "g.yaml",
                project_config_path=tmp_path / "p.yaml",
            )

    def test_invalid_yaml_file(self, tmp_path):
        """Test handling of invalid YAML files."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("invalid: yaml: content:")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_only(tmp_path, bad)

    def test_non_mapping_yaml_file(self, tmp_path):
        listing = write_yaml(tmp_path / "list.yaml", ["a", "b"])
        with pytest.raises(ConfigurationError, match="YAML object"):
            load_only(tmp_path, listing)

    def test_invalid_values(self, tmp_path):
        invalid = write_yaml(tmp_path / "invalid.yaml", {"service": {"timeout": -1}})
        with pytest.raises(ConfigurationError, match="validation failed"):
            load_only(tmp_path, invalid)

    def test_empty_file_uses_defaults(self, tmp_path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        config = load_only(tmp_path, empty)
        assert config.service.base_url == "http://localhost:8000"

    def test_config_directory_creation(self, tmp_path):
        """Test that save_config creates parent directories."""
        config_path = tmp_path / "subdir" / "config.yaml"
        save_config(PlaygroundConfig(), config_path)
        assert config_path.exists()
