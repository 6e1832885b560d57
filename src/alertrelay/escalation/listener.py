"""
Telegram command listener.

Long-polls the bot for operator messages and answers each one in the chat it
came from. Only the configured warning/critical chats may issue commands.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import anyio

from alertrelay.escalation.commands import CommandHandler
from alertrelay.notifications.telegram import IncomingMessage, TelegramChannel
from alertrelay.shared.exceptions import NotificationError
from alertrelay.shared.logging import correlation_scope, get_logger

logger = get_logger(__name__)


class TelegramCommandListener:
    """Feeds bot messages to a CommandHandler and replies with the result."""

    def __init__(
        self,
        channel: TelegramChannel,
        handler: CommandHandler,
        allowed_chat_ids: Iterable[str],
        retry_sleep_seconds: float = 5.0,
    ) -> None:
        self._channel = channel
        self._handler = handler
        self._allowed = {c for c in allowed_chat_ids if c}
        self._retry_sleep = retry_sleep_seconds
        self._offset: int | None = None

    @property
    def offset(self) -> int | None:
        return self._offset

    def process(self, messages: list[IncomingMessage]) -> int:
        """Handle a batch of polled messages; returns how many were answered."""
        answered = 0
        for message in messages:
            self._offset = message.update_id + 1
            if not message.text:
                continue
            if message.chat_id not in self._allowed:
                logger.warning(
                    "Ignoring command from unknown chat",
                    extra={"chat_id": message.chat_id},
                )
                continue
            with correlation_scope(f"update-{message.update_id}"):
                reply = self._handler.handle_safely(message.text)
                self._channel.send_message(message.chat_id, reply)
            answered += 1
        return answered

    def poll_once(self) -> int:
        return self.process(self._channel.get_updates(self._offset))

    async def run(self) -> None:
        """Poll until cancelled; any failure is logged and polling resumes."""
        logger.info("Telegram command listener started")
        while True:
            try:
                await anyio.to_thread.run_sync(self.poll_once)
            except asyncio.CancelledError:
                logger.info("Telegram command listener cancelled; stopping")
                raise
            except NotificationError as e:
                logger.warning(
                    "Telegram polling failed; retrying",
                    extra={"error": e.message, "sleep_seconds": self._retry_sleep},
                )
                await asyncio.sleep(self._retry_sleep)
            except Exception:
                logger.exception(
                    "Telegram command processing failed; retrying",
                    extra={"sleep_seconds": self._retry_sleep},
                )
                await asyncio.sleep(self._retry_sleep)
