"""
Shared fixtures: a fixed clock, file-backed schedule, mock call provider and
in-memory channel.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from alertrelay.escalation.controller import CallAttemptController
from alertrelay.escalation.scheduler import EscalationScheduler
from alertrelay.escalation.state import InMemoryCallStateStore
from alertrelay.escalation.store import JsonFileScheduleStore
from alertrelay.notifications.memory import InMemoryChannel
from alertrelay.telephony.adapters.mock import MockCallProvider

LINE_NUMBER = "74951332210"
SIP_ID = "51326"


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_moscow(self, hour: int, minute: int) -> None:
        # Moscow is UTC+3 all year
        self.now = self.now.replace(hour=(hour - 3) % 24, minute=minute, second=0)

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    # 18:00 Moscow time
    return FakeClock(datetime(2024, 3, 15, 15, 0, tzinfo=timezone.utc))


@pytest.fixture
def schedule_path(tmp_path: Path) -> Path:
    return tmp_path / "config" / "schedule.json"


@pytest.fixture
def schedule_store(schedule_path: Path) -> JsonFileScheduleStore:
    return JsonFileScheduleStore(schedule_path)


@pytest.fixture
def state_store() -> InMemoryCallStateStore:
    return InMemoryCallStateStore()


@pytest.fixture
def scheduler(
    schedule_store: JsonFileScheduleStore,
    state_store: InMemoryCallStateStore,
    clock: FakeClock,
) -> EscalationScheduler:
    return EscalationScheduler(schedule_store, state_store, clock=clock)


@pytest.fixture
def provider() -> MockCallProvider:
    return MockCallProvider()


@pytest.fixture
def controller(
    scheduler: EscalationScheduler,
    provider: MockCallProvider,
) -> CallAttemptController:
    return CallAttemptController(
        scheduler=scheduler,
        provider=provider,
        line_number=LINE_NUMBER,
        sip_id=SIP_ID,
    )


@pytest.fixture
def channel() -> InMemoryChannel:
    return InMemoryChannel()
