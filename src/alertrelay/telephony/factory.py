"""
Call provider factory.

Single source of truth for configuration: TelephonyConfig (pydantic
settings), never raw os.getenv here.
"""

from __future__ import annotations

from functools import lru_cache

from alertrelay.shared.logging import get_logger, mask_secret
from alertrelay.telephony.adapters.mock import MockCallProvider
from alertrelay.telephony.adapters.plusofon import PlusofonAdapter
from alertrelay.telephony.config import ProviderType, TelephonyConfig
from alertrelay.telephony.config import get_telephony_config as _load_telephony_config
from alertrelay.telephony.interface import CallProvider

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_telephony_config() -> TelephonyConfig:
    """Return cached TelephonyConfig loaded from OS env + .env."""
    return _load_telephony_config()


@lru_cache(maxsize=1)
def get_call_provider() -> CallProvider:
    """Create and cache the call provider using TelephonyConfig."""
    cfg = get_telephony_config()

    logger.info(
        "Telephony config resolved",
        extra={
            "provider_type": cfg.provider_type.value,
            "plusofon_client_id": mask_secret(cfg.plusofon_client_id),
            "plusofon_api_url": cfg.plusofon_api_url,
            "line_number": cfg.line_number,
            "call_timeout_seconds": cfg.call_timeout_seconds,
        },
    )

    if cfg.provider_type == ProviderType.PLUSOFON:
        if not cfg.has_credentials:
            logger.warning("Plusofon credentials are empty; calls will be rejected")
        return PlusofonAdapter(cfg)

    if cfg.provider_type == ProviderType.MOCK:
        return MockCallProvider()

    raise ValueError(f"Unsupported telephony provider_type: {cfg.provider_type}")
