"""
Notification channel configuration.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChannelType(str, Enum):
    """Supported notification channel types."""

    TELEGRAM = "telegram"
    MEMORY = "memory"


class NotificationConfig(BaseSettings):
    """Telegram channel configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    channel_type: ChannelType = Field(default=ChannelType.TELEGRAM)

    bot_token: str = Field(default="")
    warning_chat_id: str = Field(default="")
    critical_chat_id: str = Field(default="")
    api_base_url: str = Field(default="https://api.telegram.org")

    # Operator commands over getUpdates long polling
    commands_enabled: bool = Field(default=False)
    poll_timeout_seconds: int = Field(default=60, ge=0, le=300)

    request_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    @property
    def destinations(self) -> dict[str, str]:
        """Severity label to chat id."""
        return {
            "Warning": self.warning_chat_id,
            "Critical": self.critical_chat_id,
        }

    def get_method_url(self, method: str) -> str:
        base = self.api_base_url.rstrip("/")
        return f"{base}/bot{self.bot_token}/{method}"


def get_notification_config() -> NotificationConfig:
    return NotificationConfig()
