"""
Escalation engine wiring.

Cached singletons built from Settings and TelephonyConfig. Tests build the
classes directly or override the FastAPI dependencies.
"""

from __future__ import annotations

from functools import lru_cache

from alertrelay.config import get_settings
from alertrelay.escalation.commands import CommandHandler
from alertrelay.escalation.controller import CallAttemptController
from alertrelay.escalation.scheduler import EscalationScheduler
from alertrelay.escalation.state import CallStateStore, InMemoryCallStateStore
from alertrelay.escalation.store import JsonFileScheduleStore, ScheduleStore
from alertrelay.telephony.factory import get_call_provider, get_telephony_config


@lru_cache(maxsize=1)
def get_schedule_store() -> ScheduleStore:
    return JsonFileScheduleStore(get_settings().schedule_file)


@lru_cache(maxsize=1)
def get_call_state_store() -> CallStateStore:
    return InMemoryCallStateStore()


@lru_cache(maxsize=1)
def get_escalation_scheduler() -> EscalationScheduler:
    settings = get_settings()
    return EscalationScheduler(
        store=get_schedule_store(),
        state=get_call_state_store(),
        tz=settings.tzinfo,
        success_window=settings.success_suppression_window,
        mute_duration=settings.mute_duration,
    )


@lru_cache(maxsize=1)
def get_call_controller() -> CallAttemptController:
    settings = get_settings()
    telephony = get_telephony_config()
    return CallAttemptController(
        scheduler=get_escalation_scheduler(),
        provider=get_call_provider(),
        line_number=telephony.line_number,
        sip_id=telephony.sip_id,
        max_attempts=settings.max_attempts_per_responder,
    )


@lru_cache(maxsize=1)
def get_command_handler() -> CommandHandler:
    return CommandHandler(
        get_escalation_scheduler(),
        tz_label=get_settings().reference_timezone_label,
    )
