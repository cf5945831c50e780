"""Tests for ConfigManager."""

import json
from pathlib import Path

import pytest

from podarchive.config.manager import CONFIG_ENV_VAR, ConfigManager, resolve_config_file
from podarchive.utils.errors import ConfigNotFoundError, InvalidConfigError

YAML_CONFIG = """\
output_path: /srv/podcasts
download_times:
  - "02:00"
  - 14:30
log_level: DEBUG
feeds:
  - url: https://example.com/feed.xml
    title: My Show
    count: 10
  - url: https://example.org/other.rss
"""


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        """Test loading a YAML configuration."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(YAML_CONFIG)

        config = ConfigManager(config_file).load_config()

        assert config.output_path == Path("/srv/podcasts")
        assert [t.strftime("%H:%M") for t in config.download_times] == ["02:00", "14:30"]
        assert config.log_level == "DEBUG"
        assert len(config.feeds) == 2
        assert config.feeds[0].title == "My Show"
        assert config.feeds[0].count == 10
        assert config.feeds[1].title is None
        assert config.feeds[1].count is None

    def test_load_json_with_camel_case(self, tmp_path: Path) -> None:
        """Test loading a JSON configuration with camelCase keys."""
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps(
                {
                    "outputPath": "archive",
                    "downloadTimes": ["06:15"],
                    "feeds": [{"url": "https://example.com/feed.xml", "count": 3}],
                }
            )
        )

        config = ConfigManager(config_file).load_config()

        assert config.output_path == Path("archive")
        assert config.download_times[0].hour == 6
        assert config.download_times[0].minute == 15
        assert config.feeds[0].count == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing config file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError, match="not found"):
            ConfigManager(tmp_path / "nope.yaml").load_config()

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Test unparsable YAML raises InvalidConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("feeds: [unclosed\n")

        with pytest.raises(InvalidConfigError):
            ConfigManager(config_file).load_config()

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """Test a top-level list raises InvalidConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(InvalidConfigError, match="mapping"):
            ConfigManager(config_file).load_config()

    def test_validation_error(self, tmp_path: Path) -> None:
        """Test schema violations raise InvalidConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("feeds:\n  - url: not a url\n")

        with pytest.raises(InvalidConfigError, match="Invalid configuration"):
            ConfigManager(config_file).load_config()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test an empty file yields the default configuration."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = ConfigManager(config_file).load_config()

        assert config.feeds == []
        assert config.output_path == Path("downloads")


class TestResolveConfigFile:
    """Tests for config file lookup."""

    def test_explicit_path_wins(self, tmp_path, monkeypatch) -> None:
        """Test an explicit path beats the environment."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))

        assert resolve_config_file(tmp_path / "explicit.yaml") == tmp_path / "explicit.yaml"

    def test_environment_variable(self, tmp_path, monkeypatch) -> None:
        """Test the environment variable is used without explicit path."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))

        assert ConfigManager().config_file == tmp_path / "env.yaml"

    def test_working_directory(self, tmp_path, monkeypatch) -> None:
        """Test a config file in the working directory is found."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yml").write_text("feeds: []\n")

        assert resolve_config_file() == tmp_path / "config.yml"

    def test_user_config_dir_fallback(self, tmp_path, monkeypatch) -> None:
        """Test the per-user config directory is the last resort."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "podarchive.config.manager.get_config_dir", lambda: tmp_path / "user"
        )

        assert resolve_config_file() == tmp_path / "user" / "config.yaml"
