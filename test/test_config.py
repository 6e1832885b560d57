"""Tests for environment-driven configuration."""

from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from alertrelay.config import Settings, get_settings
from alertrelay.notifications.config import ChannelType, NotificationConfig
from alertrelay.telephony.config import ProviderType, TelephonyConfig


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.schedule_file == "config/schedule.json"
        assert settings.tzinfo == ZoneInfo("Europe/Moscow")
        assert settings.mute_duration == timedelta(hours=2)
        assert settings.success_suppression_window == timedelta(hours=1)
        assert settings.max_attempts_per_responder == 3
        assert settings.queue_max_size == 100
        assert settings.queue_workers == 5

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEDULE_FILE", "/data/oncall.json")
        monkeypatch.setenv("MUTE_DURATION_MINUTES", "30")

        settings = get_settings()

        assert settings.schedule_file == "/data/oncall.json"
        assert settings.mute_duration == timedelta(minutes=30)

    def test_unknown_timezone(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, reference_timezone="Mars/Olympus")


class TestTelephonyConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TELEPHONY_PROVIDER_TYPE", raising=False)
        cfg = TelephonyConfig(_env_file=None)

        assert cfg.provider_type == ProviderType.PLUSOFON
        assert cfg.plusofon_api_url == "https://restapi.plusofon.ru/api/v1/call/quickcall"
        assert cfg.line_number == "74951332210"
        assert cfg.sip_id == "51326"

    def test_prefixed_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TELEPHONY_PLUSOFON_TOKEN", "tok")
        monkeypatch.setenv("TELEPHONY_PLUSOFON_CLIENT_ID", "cid")

        assert TelephonyConfig(_env_file=None).has_credentials


class TestNotificationConfig:
    def test_destinations(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TELEGRAM_WARNING_CHAT_ID", "-1")
        monkeypatch.setenv("TELEGRAM_CRITICAL_CHAT_ID", "-2")
        monkeypatch.setenv("TELEGRAM_CHANNEL_TYPE", "memory")

        cfg = NotificationConfig(_env_file=None)

        assert cfg.channel_type == ChannelType.MEMORY
        assert cfg.destinations == {"Warning": "-1", "Critical": "-2"}

    def test_method_url(self) -> None:
        cfg = NotificationConfig(_env_file=None, bot_token="1:x", api_base_url="https://api.test/")

        assert cfg.get_method_url("getUpdates") == "https://api.test/bot1:x/getUpdates"

