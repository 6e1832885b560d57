"""
Pydantic schemas for the escalation admin API.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from alertrelay.escalation.models import ScheduleEntry
from alertrelay.escalation.scheduler import MAX_MUTE_MINUTES


class ScheduleWindowIn(BaseModel):
    """A window as submitted by an operator; times are validated by the scheduler."""

    start_time: str = Field(..., description="Window start, HH:MM", examples=["09:00"])
    end_time: str = Field(..., description="Window end, HH:MM", examples=["17:00"])
    phone_number: str = Field(..., description="Responder number", examples=["+79990000001"])


class ScheduleCreateRequest(BaseModel):
    entries: list[ScheduleWindowIn] = Field(..., min_length=1)


class ScheduleResponse(BaseModel):
    entries: list[ScheduleEntry]


class MuteRequest(BaseModel):
    minutes: int | None = Field(
        default=None,
        gt=0,
        le=MAX_MUTE_MINUTES,
        description="Mute duration; the configured default when omitted",
    )


class MuteStatusResponse(BaseModel):
    muted: bool
    muted_until: datetime | None = None


class CommandRequest(BaseModel):
    text: str = Field(..., min_length=1, examples=["set_schedule 09:00 17:00 +79990000001"])


class CommandResponse(BaseModel):
    reply: str
