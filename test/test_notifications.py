"""Tests for message splitting and the Telegram channel."""

import json

import httpx
import pytest

from alertrelay.notifications.config import ChannelType, NotificationConfig
from alertrelay.notifications.interface import split_long_message
from alertrelay.notifications.memory import InMemoryChannel
from alertrelay.notifications.telegram import TelegramChannel
from alertrelay.shared.exceptions import NotificationError, UnknownSeverity


@pytest.fixture
def telegram_config() -> NotificationConfig:
    return NotificationConfig(
        channel_type=ChannelType.TELEGRAM,
        bot_token="123:ABC",
        warning_chat_id="-100",
        critical_chat_id="-200",
        api_base_url="https://telegram.example.test",
    )


def make_channel(config: NotificationConfig, handler) -> TelegramChannel:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramChannel(config=config, http_client=client)


class TestSplitLongMessage:
    def test_short_message_untouched(self) -> None:
        assert split_long_message("hello", limit=10) == ["hello"]

    def test_splits_on_last_newline(self) -> None:
        chunks = split_long_message("aaaa\nbbbb\ncccc", limit=10)

        assert chunks == ["aaaa\nbbbb", "\ncccc"]
        assert all(len(c) <= 10 for c in chunks)

    def test_hard_cut_without_newline(self) -> None:
        assert split_long_message("x" * 25, limit=10) == ["x" * 10, "x" * 10, "x" * 5]

    def test_default_limit(self) -> None:
        text = ("line\n" * 2000).strip()

        chunks = split_long_message(text)

        assert len(chunks) == 3
        assert all(len(c) <= 4096 for c in chunks)
        assert "".join(chunks) == text


class TestDestinations:
    def test_known_severities(self, telegram_config: NotificationConfig) -> None:
        channel = TelegramChannel(config=telegram_config)

        assert channel.destination_for("Warning") == "-100"
        assert channel.destination_for("Critical") == "-200"

    def test_unknown_severity(self) -> None:
        with pytest.raises(UnknownSeverity) as exc_info:
            InMemoryChannel().destination_for("Info")

        assert exc_info.value.message == "Unknown severity level: 'Info'"

    def test_unconfigured_chat_is_unknown(self) -> None:
        channel = TelegramChannel(config=NotificationConfig(bot_token="t", warning_chat_id="-1"))

        with pytest.raises(UnknownSeverity):
            channel.destination_for("Critical")


class TestTelegramChannel:
    def test_send_message(self, telegram_config: NotificationConfig) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True, "result": {}})

        make_channel(telegram_config, handler).send_message("-100", "hello")

        assert str(seen[0].url) == "https://telegram.example.test/bot123:ABC/sendMessage"
        assert json.loads(seen[0].content) == {"chat_id": "-100", "text": "hello"}

    def test_long_message_sent_in_chunks(self, telegram_config: NotificationConfig) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "result": {}})

        make_channel(telegram_config, handler).send_message("-100", "a" * 5000)

        assert [len(p["text"]) for p in seen] == [4096, 904]

    def test_api_error_raises(self, telegram_config: NotificationConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"ok": False, "error_code": 400, "description": "Bad Request: chat not found"},
            )

        with pytest.raises(NotificationError) as exc_info:
            make_channel(telegram_config, handler).send_message("-1", "x")

        assert exc_info.value.message == "Bad Request: chat not found"
        assert exc_info.value.error_code == "400"

    def test_non_object_body_raises(self, telegram_config: NotificationConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, json=["bad", "gateway"])

        with pytest.raises(NotificationError) as exc_info:
            make_channel(telegram_config, handler).send_message("-1", "x")

        assert exc_info.value.error_code == "502"

    def test_transport_error_raises(self, telegram_config: NotificationConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(NotificationError) as exc_info:
            make_channel(telegram_config, handler).send_message("-1", "x")

        assert exc_info.value.error_code == "HTTP_ERROR"

    def test_get_updates(self, telegram_config: NotificationConfig) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "ok": True,
                    "result": [
                        {"update_id": 10, "message": {"chat": {"id": -100}, "text": "schedule"}},
                        {"update_id": 11, "message": {"chat": {"id": -100}, "sticker": {}}},
                    ],
                },
            )

        messages = make_channel(telegram_config, handler).get_updates(offset=10)

        assert seen[0]["offset"] == 10
        assert [(m.update_id, m.chat_id, m.text) for m in messages] == [
            (10, "-100", "schedule"),
            (11, "", ""),
        ]


class TestInMemoryChannel:
    def test_records_and_resets(self) -> None:
        channel = InMemoryChannel()

        channel.send_message("warning", "one")
        assert channel.messages_for("warning") == ["one"]

        channel.reset()
        assert channel.sent == []
