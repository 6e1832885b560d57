"""
Outbound call provider configuration.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(str, Enum):
    """Supported call provider types."""

    PLUSOFON = "plusofon"
    MOCK = "mock"


class TelephonyConfig(BaseSettings):
    """Call provider configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="TELEPHONY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    provider_type: ProviderType = Field(default=ProviderType.PLUSOFON)

    # Provider credentials
    plusofon_token: str = Field(default="")
    plusofon_client_id: str = Field(default="")
    plusofon_api_url: str = Field(
        default="https://restapi.plusofon.ru/api/v1/call/quickcall",
    )

    # Caller line used for every escalation call
    line_number: str = Field(default="74951332210")
    sip_id: str = Field(default="51326")

    # A hung call placement stalls a whole batch, keep this bounded
    call_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    @property
    def has_credentials(self) -> bool:
        return bool(self.plusofon_token and self.plusofon_client_id)


def get_telephony_config() -> TelephonyConfig:
    return TelephonyConfig()
