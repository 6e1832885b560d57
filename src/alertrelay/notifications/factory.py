"""
Notification channel factory.
"""

from __future__ import annotations

from functools import lru_cache

from alertrelay.notifications.config import ChannelType, NotificationConfig
from alertrelay.notifications.config import (
    get_notification_config as _load_notification_config,
)
from alertrelay.notifications.interface import NotificationChannel
from alertrelay.notifications.memory import InMemoryChannel
from alertrelay.notifications.telegram import TelegramChannel
from alertrelay.shared.logging import get_logger, mask_secret

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_notification_config() -> NotificationConfig:
    return _load_notification_config()


@lru_cache(maxsize=1)
def get_notification_channel() -> NotificationChannel:
    """Create and cache the notification channel."""
    cfg = get_notification_config()

    logger.info(
        "Notification config resolved",
        extra={
            "channel_type": cfg.channel_type.value,
            "bot_token": mask_secret(cfg.bot_token),
            "warning_chat_id": cfg.warning_chat_id,
            "critical_chat_id": cfg.critical_chat_id,
            "commands_enabled": cfg.commands_enabled,
        },
    )

    if cfg.channel_type == ChannelType.TELEGRAM:
        return TelegramChannel(cfg)

    if cfg.channel_type == ChannelType.MEMORY:
        return InMemoryChannel(
            {severity: chat_id or severity.lower() for severity, chat_id in cfg.destinations.items()}
        )

    raise ValueError(f"Unsupported channel_type: {cfg.channel_type}")
