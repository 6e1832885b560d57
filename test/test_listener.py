"""Tests for the Telegram command listener."""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from alertrelay.escalation.commands import CommandHandler
from alertrelay.escalation.listener import TelegramCommandListener
from alertrelay.escalation.scheduler import EscalationScheduler
from alertrelay.notifications.telegram import IncomingMessage, TelegramChannel
from alertrelay.shared.exceptions import NotificationError


@pytest.fixture
def telegram() -> MagicMock:
    return MagicMock(spec=TelegramChannel)


@pytest.fixture
def listener(telegram: MagicMock, scheduler: EscalationScheduler) -> TelegramCommandListener:
    return TelegramCommandListener(
        telegram,
        CommandHandler(scheduler),
        allowed_chat_ids=["-100", "-200", ""],
        retry_sleep_seconds=0,
    )


class TestProcess:
    def test_replies_in_same_chat(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
        scheduler: EscalationScheduler,
    ) -> None:
        answered = listener.process(
            [IncomingMessage(5, "-200", "/set_schedule 09:00 17:00 +1")]
        )

        assert answered == 1
        assert scheduler.schedule_size() == 1
        chat_id, reply = telegram.send_message.call_args.args
        assert chat_id == "-200"
        assert reply.startswith("Schedule saved successfully.")
        assert listener.offset == 6

    def test_errors_are_replied(self, listener: TelegramCommandListener, telegram: MagicMock) -> None:
        listener.process([IncomingMessage(1, "-100", "set_schedule 9:00 17:00 +1")])

        _, reply = telegram.send_message.call_args.args
        assert reply.startswith("Error: ")

    def test_out_of_range_mute_is_replied(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
        scheduler: EscalationScheduler,
    ) -> None:
        listener.process([IncomingMessage(2, "-100", "mute 10000000000")])

        _, reply = telegram.send_message.call_args.args
        assert reply.startswith("Error: ")
        assert not scheduler.is_muted()

    def test_unknown_chat_ignored(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
        scheduler: EscalationScheduler,
    ) -> None:
        answered = listener.process([IncomingMessage(7, "-999", "mute")])

        assert answered == 0
        assert not scheduler.is_muted()
        telegram.send_message.assert_not_called()
        assert listener.offset == 8

    def test_non_text_updates_advance_offset(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
    ) -> None:
        listener.process([IncomingMessage(3, "", "")])

        assert listener.offset == 4
        telegram.send_message.assert_not_called()

    def test_poll_once_passes_offset(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
    ) -> None:
        telegram.get_updates.return_value = [IncomingMessage(41, "-100", "unmute")]
        listener.poll_once()

        telegram.get_updates.return_value = []
        listener.poll_once()

        assert telegram.get_updates.call_args_list[1].args == (42,)


class TestRun:
    @pytest.mark.asyncio
    async def test_survives_polling_errors_and_cancels(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
    ) -> None:
        # set from the worker thread
        polled = threading.Event()

        def get_updates(offset):
            if telegram.get_updates.call_count == 1:
                raise NotificationError("timeout")
            polled.set()
            return []

        telegram.get_updates.side_effect = get_updates

        task = asyncio.create_task(listener.run())
        for _ in range(500):
            if polled.is_set():
                break
            await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert telegram.get_updates.call_count >= 2

    @pytest.mark.asyncio
    async def test_survives_unexpected_errors(
        self,
        listener: TelegramCommandListener,
        telegram: MagicMock,
    ) -> None:
        polled = threading.Event()

        def get_updates(offset):
            if telegram.get_updates.call_count == 1:
                raise RuntimeError("unexpected")
            polled.set()
            return []

        telegram.get_updates.side_effect = get_updates

        task = asyncio.create_task(listener.run())
        for _ in range(500):
            if polled.is_set():
                break
            await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert polled.is_set()
