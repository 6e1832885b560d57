"""
Admin API for the on-call schedule, the mute window and text commands.

Handlers are sync: schedule access is file I/O and FastAPI runs them in its
threadpool.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, status

from alertrelay.escalation.commands import CommandHandler
from alertrelay.escalation.factory import get_command_handler, get_escalation_scheduler
from alertrelay.escalation.scheduler import EscalationScheduler
from alertrelay.escalation.schemas import (
    CommandRequest,
    CommandResponse,
    MuteRequest,
    MuteStatusResponse,
    ScheduleCreateRequest,
    ScheduleResponse,
)

router = APIRouter(tags=["escalation"])

SchedulerDep = Annotated[EscalationScheduler, Depends(get_escalation_scheduler)]
CommandHandlerDep = Annotated[CommandHandler, Depends(get_command_handler)]


@router.get("/schedule", response_model=ScheduleResponse)
def get_schedule(scheduler: SchedulerDep) -> ScheduleResponse:
    return ScheduleResponse(entries=scheduler.list_schedule())


@router.post(
    "/schedule",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_schedule(body: ScheduleCreateRequest, scheduler: SchedulerDep) -> ScheduleResponse:
    """Append windows; any invalid window rejects the whole request."""
    entries = scheduler.add_schedules(
        (w.start_time, w.end_time, w.phone_number) for w in body.entries
    )
    return ScheduleResponse(entries=entries)


@router.get("/mute", response_model=MuteStatusResponse)
def get_mute(scheduler: SchedulerDep) -> MuteStatusResponse:
    muted = scheduler.is_muted()
    return MuteStatusResponse(muted=muted, muted_until=scheduler.mute_until if muted else None)


@router.post("/mute", response_model=MuteStatusResponse)
def mute(scheduler: SchedulerDep, body: MuteRequest | None = None) -> MuteStatusResponse:
    duration = timedelta(minutes=body.minutes) if body and body.minutes else None
    until = scheduler.set_mute(duration)
    return MuteStatusResponse(muted=True, muted_until=until)


@router.delete("/mute", response_model=MuteStatusResponse)
def unmute(scheduler: SchedulerDep) -> MuteStatusResponse:
    scheduler.clear_mute()
    return MuteStatusResponse(muted=False)


@router.post("/commands", response_model=CommandResponse)
def run_command(body: CommandRequest, handler: CommandHandlerDep) -> CommandResponse:
    return CommandResponse(reply=handler.handle(body.text))
