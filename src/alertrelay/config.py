"""
Application configuration with environment-driven settings.
"""

import os
from datetime import timedelta
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "alertrelay"
    app_env: Literal["dev", "qa", "uat", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8082

    # On-call schedule
    schedule_file: str = Field(
        default="config/schedule.json",
        description="Path of the JSON file holding the on-call schedule",
    )
    reference_timezone: str = Field(
        default="Europe/Moscow",
        description="IANA timezone used for schedule lookups and message timestamps",
    )
    reference_timezone_label: str = Field(
        default="MSK",
        description="Suffix printed after timestamps in alert messages",
    )

    # Escalation
    mute_duration_minutes: int = Field(
        default=120,
        ge=1,
        description="Default duration of the mute command in minutes",
    )
    success_suppression_minutes: int = Field(
        default=60,
        ge=0,
        description="Responders with a successful call this recent are skipped",
    )
    max_attempts_per_responder: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Call attempts per responder before rotating to the next one",
    )

    # Alert batch queue
    queue_enabled: bool = Field(
        default=False,
        description="Buffer inbound batches and process them on a worker pool",
    )
    queue_max_size: int = Field(default=100, ge=1)
    queue_workers: int = Field(default=5, ge=1, le=64)

    @field_validator("reference_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.reference_timezone)

    @property
    def mute_duration(self) -> timedelta:
        return timedelta(minutes=self.mute_duration_minutes)

    @property
    def success_suppression_window(self) -> timedelta:
        return timedelta(minutes=self.success_suppression_minutes)


@lru_cache(maxsize=1)
def _get_settings_cached() -> Settings:
    return Settings()


def get_settings() -> Settings:
    # Under pytest env vars change between tests; never hand out a frozen copy.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return Settings()
    return _get_settings_cached()
