"""
Configuration loading and validation for Logsentry.

The schema is strict: unknown keys are rejected at every level. Keys use
camelCase in the YAML file (e.g. alertKeywords, messageTemplate).
"""

import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from logsentry.errors import ConfigError, RenderError
from logsentry.formatter import AlertFormatter


class StrictModel(BaseModel):
    """Base model that forbids unknown fields."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class LogConfig(StrictModel):
    """Which lines raise alerts."""
    alert_keywords: tuple[str, ...] = Field(..., alias="alertKeywords", min_length=1)

    @field_validator("alert_keywords")
    @classmethod
    def _no_empty_keywords(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # An empty keyword would match every line
        if any(not keyword for keyword in value):
            raise ValueError("alert keywords must be non-empty strings")
        return value


class NotificationConfig(StrictModel):
    """Where and how alerts are delivered."""
    type: Literal["telegram", "console"] = "telegram"
    token: str = ""
    chat_id: int | None = Field(None, alias="chatId")
    message_template: str = Field(..., alias="messageTemplate", min_length=1)
    timeout_seconds: float = Field(10.0, alias="timeoutSeconds", gt=0)
    max_retries: int = Field(0, alias="maxRetries", ge=0)
    retry_backoff_seconds: float = Field(1.0, alias="retryBackoffSeconds", ge=0)

    @field_validator("message_template")
    @classmethod
    def _template_renders(cls, value: str) -> str:
        try:
            AlertFormatter(value).check()
        except RenderError as e:
            raise ValueError(str(e)) from e
        return value

    @model_validator(mode="after")
    def _telegram_needs_credentials(self) -> "NotificationConfig":
        if self.type == "telegram":
            if not self.token:
                raise ValueError("notification.token is required for telegram")
            if self.chat_id is None:
                raise ValueError("notification.chatId is required for telegram")
        return self

    def notifier_settings(self) -> dict[str, Any]:
        """Type-specific settings handed to the notifier factory."""
        return self.model_dump(exclude={"type", "message_template"})


class WatchConfig(StrictModel):
    """Which files are watched and how often."""
    root: str = "."
    pattern: str = r"^.*\.log$"  # Matched against the file name
    interval_seconds: float = Field(0.1, alias="intervalSeconds", gt=0)
    recursive: bool = True

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid file name pattern {value!r}: {e}") from e
        return value


class Config(StrictModel):
    """Main configuration for Logsentry."""
    log: LogConfig
    notification: NotificationConfig
    watch: WatchConfig = Field(default_factory=WatchConfig)


def load_config(config_path: str | Path) -> Config:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file is not valid YAML or fails validation
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with path.open('r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Configuration is not valid YAML: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")

    try:
        return Config.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation error: {e}") from e
