"""
otelsiphon Configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables prefixed with ``OTELSIPHON_``.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_xdg_state_dir() -> str:
    """
    Get XDG-compliant state directory for otelsiphon logs.

    Follows XDG Base Directory Specification:
    - Uses $XDG_STATE_HOME/otelsiphon if XDG_STATE_HOME is set
    - Falls back to $HOME/.local/state/otelsiphon if not set
    - Returns relative path ./logs if HOME not available (dev/testing)

    Returns:
        str: Path to state/logs directory
    """
    xdg_state_home = os.getenv("XDG_STATE_HOME")
    if xdg_state_home:
        return str(Path(xdg_state_home) / "otelsiphon" / "logs")

    home = os.getenv("HOME")
    if home:
        return str(Path(home) / ".local" / "state" / "otelsiphon" / "logs")

    # Fallback for development/testing environments without HOME
    return "./logs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OTELSIPHON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 4318  # OTLP/HTTP default port
    api_reload: bool = False

    # Ingestion
    max_payload_bytes: int | None = None  # Optional limit after decompression
    max_value_depth: int = 32  # Max nesting of array/kvlist values

    # Sink
    sink_type: str = "jsonl"  # http, jsonl, database or memory
    sink_url: str = ""  # Pipeline HTTP endpoint for the http sink
    sink_token: str = ""  # Optional bearer token for the http sink
    sink_timeout: float = 30.0
    sink_path: str = "./otel_logs.jsonl"  # Output file for the jsonl sink
    database_url: str = "sqlite:///./otelsiphon.db"

    # Application
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # XDG-compliant log directory (defaults to XDG state dir if empty)
    log_format: str = "standard"  # standard or json
    log_console_enabled: bool = True  # Enable console (stdout/stderr) logging
    log_file_enabled: bool = False  # Enable file-based logging
    log_max_bytes: int = 10_485_760  # 10MB per log file
    log_backup_count: int = 5  # Keep 5 backup files

    @property
    def log_directory(self) -> Path:
        """Get the log directory path, using XDG default if not specified."""
        if self.log_dir:
            return Path(self.log_dir).expanduser()
        return Path(get_xdg_state_dir())


# Global settings instance
settings = Settings()
