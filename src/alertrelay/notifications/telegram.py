"""
Telegram Bot API notification channel.

Delivery uses ``sendMessage``; operator commands are read with
``getUpdates`` long polling (see ``alertrelay.escalation.listener``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from alertrelay.notifications.config import NotificationConfig, get_notification_config
from alertrelay.notifications.interface import NotificationChannel
from alertrelay.shared.exceptions import NotificationError
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IncomingMessage:
    """A text message received by the bot."""

    update_id: int
    chat_id: str
    text: str


class TelegramChannel(NotificationChannel):
    """Sends alert messages to Telegram chats selected by severity."""

    def __init__(
        self,
        config: NotificationConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or get_notification_config()
        super().__init__(self._config.destinations)
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            # getUpdates holds the connection for poll_timeout_seconds
            timeout = self._config.request_timeout_seconds + self._config.poll_timeout_seconds
            self._http_client = httpx.Client(timeout=httpx.Timeout(timeout))
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _call(self, method: str, payload: dict[str, Any]) -> Any:
        client = self._get_client()
        try:
            response = client.post(self._config.get_method_url(method), json=payload)
        except httpx.HTTPError as e:
            raise NotificationError(
                f"HTTP error calling Telegram {method}: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code != httpx.codes.OK or not data.get("ok", False):
            raise NotificationError(
                data.get("description") or f"Telegram {method} failed: {response.status_code}",
                error_code=str(data.get("error_code", response.status_code)),
                details={"method": method, "status_code": response.status_code},
            )
        return data.get("result")

    def send_chunk(self, destination: str, text: str) -> None:
        logger.debug(
            "Sending Telegram message",
            extra={"chat_id": destination, "length": len(text)},
        )
        self._call("sendMessage", {"chat_id": destination, "text": text})

    def get_updates(self, offset: int | None = None) -> list[IncomingMessage]:
        """Long-poll for new text messages addressed to the bot."""
        payload: dict[str, Any] = {
            "timeout": self._config.poll_timeout_seconds,
            "allowed_updates": ["message"],
        }
        if offset is not None:
            payload["offset"] = offset

        messages: list[IncomingMessage] = []
        for update in self._call("getUpdates", payload) or []:
            message = update.get("message") or {}
            text = message.get("text")
            chat = message.get("chat") or {}
            if not text or "id" not in chat:
                # Still acknowledge it so the offset moves past it
                messages.append(IncomingMessage(update["update_id"], "", ""))
                continue
            messages.append(
                IncomingMessage(
                    update_id=update["update_id"],
                    chat_id=str(chat["id"]),
                    text=text,
                )
            )
        return messages
