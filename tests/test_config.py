"""Tests for configuration loading.

**Feature: download-ticks**
"""

import pytest

from download_ticks.config import CONFIG_ENV_VAR, CONFIG_PATH, Settings, get_config_path, load_config
from download_ticks.errors import ConfigError
from download_ticks.models import Market


class TestLoadConfig:
    """Reading ~/.config/download-ticks/config.toml."""

    def test_missing_file_gives_defaults(self, temp_dir):
        settings = load_config(temp_dir / "missing.toml")

        assert settings == Settings()
        assert settings.http.retry_counter == 3
        assert settings.http.pause == 3.0
        assert settings.defaults.market is Market.BINANCE

    def test_values_override_defaults(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text(
            "[http]\n"
            "retry_counter = 5\n"
            "pause = 0.5\n"
            "\n"
            "[defaults]\n"
            'market = "gate"\n'
            "\n"
            "[logging]\n"
            'level = "DEBUG"\n'
        )

        settings = load_config(path)

        assert settings.http.retry_counter == 5
        assert settings.http.pause == 0.5
        assert settings.http.timeout == 30.0
        assert settings.defaults.market is Market.GATE
        assert settings.logging.level == "DEBUG"

    def test_unknown_keys_ignored(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[http]\nproxy = 'socks5://localhost'\n\n[other]\nx = 1\n")

        assert load_config(path) == Settings()

    def test_invalid_toml(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[http\nretry_counter = ")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_value(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[http]\nretry_counter = 0\n")

        with pytest.raises(ConfigError):
            load_config(path)


class TestConfigPath:
    """Config file resolution order."""

    def test_explicit_path_wins(self, temp_dir, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.toml"))
        assert get_config_path(temp_dir / "cli.toml") == temp_dir / "cli.toml"

    def test_env_var(self, temp_dir, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.toml"))
        assert get_config_path() == temp_dir / "env.toml"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert get_config_path() == CONFIG_PATH
