"""
Tests for configuration management.
"""

from pathlib import Path

import pytest

from otelsiphon.config import Settings, get_xdg_state_dir


@pytest.fixture(autouse=True)
def clear_otelsiphon_env(monkeypatch):
    """Ensure OTELSIPHON_* overrides in the environment don't affect defaults."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("OTELSIPHON_"):
            monkeypatch.delenv(key, raising=False)
    yield


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_api_settings(self):
        """Test default API settings."""
        settings = Settings(_env_file=None)

        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 4318
        assert settings.api_reload is False

    def test_default_ingestion_settings(self):
        """Test default payload and depth limits."""
        settings = Settings(_env_file=None)

        assert settings.max_payload_bytes is None
        assert settings.max_value_depth == 32
        assert settings.sink_type == "jsonl"

    def test_settings_from_env_vars(self, monkeypatch):
        """Test that settings can be overridden by prefixed environment variables."""
        monkeypatch.setenv("OTELSIPHON_SINK_TYPE", "http")
        monkeypatch.setenv("OTELSIPHON_SINK_URL", "https://pipeline.example.com")
        monkeypatch.setenv("OTELSIPHON_MAX_VALUE_DEPTH", "8")

        settings = Settings(_env_file=None)

        assert settings.sink_type == "http"
        assert settings.sink_url == "https://pipeline.example.com"
        assert settings.max_value_depth == 8

    def test_case_insensitive_env_vars(self, monkeypatch):
        """Test that environment variables are case-insensitive."""
        monkeypatch.setenv("otelsiphon_log_level", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"

    def test_unprefixed_env_vars_ignored(self, monkeypatch):
        """Test that variables without the prefix do not leak in."""
        monkeypatch.setenv("SINK_TYPE", "database")

        settings = Settings(_env_file=None)

        assert settings.sink_type == "jsonl"

    def test_log_directory_explicit(self, tmp_path):
        """Test an explicit log_dir wins over the XDG default."""
        settings = Settings(_env_file=None, log_dir=str(tmp_path))

        assert settings.log_directory == tmp_path

    def test_log_directory_default(self, monkeypatch, tmp_path):
        """Test the log directory defaults to the XDG state dir."""
        monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

        settings = Settings(_env_file=None)

        assert settings.log_directory == tmp_path / "otelsiphon" / "logs"


class TestXdgStateDir:
    """Tests for get_xdg_state_dir."""

    def test_home_fallback(self, monkeypatch, tmp_path):
        """Test $HOME/.local/state is used without XDG_STATE_HOME."""
        monkeypatch.delenv("XDG_STATE_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert Path(get_xdg_state_dir()) == tmp_path / ".local" / "state" / "otelsiphon" / "logs"

    def test_no_home(self, monkeypatch):
        """Test a relative directory is used when HOME is unset."""
        monkeypatch.delenv("XDG_STATE_HOME", raising=False)
        monkeypatch.delenv("HOME", raising=False)

        assert get_xdg_state_dir() == "./logs"
