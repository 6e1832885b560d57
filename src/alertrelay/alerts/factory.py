"""
Alert pipeline wiring.
"""

from __future__ import annotations

from functools import lru_cache

from alertrelay.alerts.dispatcher import AlertDispatcher
from alertrelay.config import get_settings
from alertrelay.escalation.factory import get_call_controller
from alertrelay.notifications.factory import get_notification_channel


@lru_cache(maxsize=1)
def get_alert_dispatcher() -> AlertDispatcher:
    settings = get_settings()
    return AlertDispatcher(
        channel=get_notification_channel(),
        controller=get_call_controller(),
        tz=settings.tzinfo,
        tz_label=settings.reference_timezone_label,
    )
