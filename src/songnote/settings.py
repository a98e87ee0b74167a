"""Application settings using pydantic-settings."""

import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from songnote.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("config.json")

LogLevel = Annotated[
    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    BeforeValidator(lambda v: v.upper() if isinstance(v, str) else v),
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SONGNOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram settings
    bot_token: SecretStr = Field(description="Telegram Bot API token")
    chat_id: str = Field(description="Target chat ID")
    chat_id_test: str = Field(default="", description="Test chat ID (used with -t)")

    # Download settings
    cookies_file: Path = Field(
        default=Path("youtube_cookies.txt"),
        description="Cookies file passed to yt-dlp when it exists",
    )
    work_dir: Path = Field(default=Path("temp"), description="Working directory")

    # Network settings
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout")

    log_level: LogLevel = Field(default="INFO", description="Log level")

    def target_chat_id(self, use_test_channel: bool = False) -> str:
        """Pick the chat to post to.

        Raises:
            ConfigError: If the test channel is requested but not configured.
        """
        if not use_test_channel:
            return self.chat_id
        if not self.chat_id_test:
            raise ConfigError(
                "Test channel requested, but 'chat_id_test' is not configured"
            )
        return self.chat_id_test


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_settings(config_path: Path | None = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings from a JSON config file and the environment.

    Values from the file take precedence over ``SONGNOTE_*`` environment
    variables. A missing file is not an error as long as the environment
    provides the required values.

    Args:
        config_path: Path to config.json (keys: bot_token, chat_id,
            chat_id_test, ...). None to use the environment only.

    Raises:
        ConfigError: If the file is unreadable or settings are invalid.
    """
    data: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        data = _read_config_file(config_path)
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
