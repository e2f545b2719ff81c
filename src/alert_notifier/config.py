"""Configuration management with Pydantic Settings.

This module provides notifier configuration validated at construction
time, plus environment-driven application settings and logging setup.
"""

from __future__ import annotations

import logging
import logging.config
from collections.abc import Mapping
from functools import lru_cache
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from alert_notifier import __version__

MISSING_URL_REASON = "Could not find webhook url property in settings"
INVALID_URL_REASON = "Webhook url must be an absolute HTTP(S) URL"


class NotifierConfig(BaseModel):
    """Static settings of a webhook notifier.

    Attributes:
        content: Free-text message content, e.g. a mention.
        url: Destination webhook URL.
    """

    model_config = ConfigDict(frozen=True)

    content: str = ""
    url: str

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v: object) -> object:
        """Treat a null content setting as empty."""
        return "" if v is None else v

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: object) -> object:
        """Require a non-empty webhook URL."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(MISSING_URL_REASON)
        return v

    @field_validator("url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Require a URL httpx can send to."""
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"{INVALID_URL_REASON}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(INVALID_URL_REASON)
        return v

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> NotifierConfig:
        """Create a config from persisted notifier settings.

        Raises:
            ValidationError: If the webhook URL is missing or invalid.
        """
        return cls(content=settings.get("content"), url=settings.get("url"))


class DiscordSettings(BaseSettings):
    """Discord notification settings."""

    model_config = SettingsConfigDict(env_prefix="DISCORD_")

    webhook_url: SecretStr | None = Field(
        default=None,
        alias="DISCORD_WEBHOOK_URL",
        description="Discord webhook URL for alerts",
    )
    content: str = Field(
        default="",
        alias="DISCORD_CONTENT",
        description="Message content, e.g. a mention",
    )

    @property
    def enabled(self) -> bool:
        """Check if Discord notifications are enabled."""
        return self.webhook_url is not None

    def to_notifier_config(self) -> NotifierConfig:
        """Convert to a notifier config.

        Raises:
            ValidationError: If no webhook URL is configured.
        """
        url = self.webhook_url.get_secret_value() if self.webhook_url else None
        return NotifierConfig.from_settings({"content": self.content, "url": url})


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from alert_notifier.config import get_settings

        settings = get_settings()
        print(settings.app_url)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    discord: DiscordSettings = Field(default_factory=DiscordSettings)

    app_url: str = Field(
        default="http://localhost:3000/",
        alias="APP_URL",
        description="Public root URL used in links back to alert rules",
    )
    build_version: str = Field(
        default=__version__,
        alias="BUILD_VERSION",
        description="Version shown in notification footers",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    webhook_timeout: float = Field(
        default=10.0,
        alias="WEBHOOK_TIMEOUT",
        description="Webhook request timeout in seconds",
        gt=0,
    )

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str) -> str:
        """Validate app URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("APP_URL must be an HTTP(S) URL")
        return v

    def redacted_summary(self) -> dict[str, str]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        webhook_url = "(not set)"
        if self.discord.webhook_url is not None:
            webhook_url = self._redact_webhook_url(self.discord.webhook_url.get_secret_value())
        return {
            "app_url": self.app_url,
            "build_version": self.build_version,
            "discord_enabled": str(self.discord.enabled),
            "discord_webhook_url": webhook_url,
            "log_level": self.log_level,
            "webhook_timeout": str(self.webhook_timeout),
        }

    @staticmethod
    def _redact_webhook_url(url: str) -> str:
        """Redact the token segment at the end of a webhook URL."""
        if "/" in url.rstrip("/"):
            base = url.rstrip("/").rsplit("/", 1)[0]
            return f"{base}/***"
        return "***"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()


def configure_logging(level: str) -> None:
    """Configure console logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)
