"""
Escalation scheduler: who is on call now, and who is next.

All scheduling decisions use a fixed reference timezone (Europe/Moscow by
default) so they do not depend on the server locale. Window matching works
on minute resolution with strict bounds: at 09:00 a 09:00-17:00 window does
not match yet, at 17:00 it no longer does.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from alertrelay.escalation.models import ScheduleEntry, parse_time_of_day
from alertrelay.escalation.state import CallStateStore, InMemoryCallStateStore
from alertrelay.escalation.store import ScheduleStore
from alertrelay.shared.exceptions import (
    ExhaustedRotation,
    InvalidCommand,
    InvalidResponder,
    InvalidTimeFormat,
    NoResponderFound,
)
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEZONE = ZoneInfo("Europe/Moscow")
DEFAULT_SUCCESS_WINDOW = timedelta(hours=1)
DEFAULT_MUTE_DURATION = timedelta(hours=2)
MAX_MUTE_MINUTES = 7 * 24 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EscalationScheduler:
    """Resolves the current on-call responder and rotates on failure."""

    def __init__(
        self,
        store: ScheduleStore,
        state: CallStateStore | None = None,
        *,
        tz: tzinfo = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = utcnow,
        success_window: timedelta = DEFAULT_SUCCESS_WINDOW,
        mute_duration: timedelta = DEFAULT_MUTE_DURATION,
    ) -> None:
        self._store = store
        self._state = state or InMemoryCallStateStore()
        self._tz = tz
        self._clock = clock
        self._success_window = success_window
        self._mute_duration = mute_duration
        # Serialises load-modify-save cycles against concurrent readers
        self._lock = threading.RLock()

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    # ------------------------------------------------------------------
    # Schedule management
    # ------------------------------------------------------------------

    def add_schedule(self, start: str, end: str, number: str) -> ScheduleEntry:
        """Validate and append a single window.

        Raises:
            InvalidTimeFormat: If ``start`` or ``end`` is not ``HH:MM``.
            ScheduleStoreError: If the schedule cannot be loaded or saved.
        """
        return self.add_schedules([(start, end, number)])[0]

    def add_schedules(
        self,
        windows: Iterable[tuple[str, str, str]],
    ) -> list[ScheduleEntry]:
        """Validate every window, then append them all in one save.

        Any invalid window aborts the whole batch and leaves the schedule
        unchanged; the error names the offending window.
        """
        new_entries: list[ScheduleEntry] = []
        for index, (start, end, number) in enumerate(windows, start=1):
            try:
                parse_time_of_day(start)
                parse_time_of_day(end)
            except InvalidTimeFormat as e:
                logger.warning(
                    "Rejected schedule window",
                    extra={"index": index, "start": start, "end": end, "error": e.message},
                )
                raise InvalidTimeFormat(
                    f"Window {index} ({start}-{end}): {e.message}",
                    details={"index": index, "start": start, "end": end},
                ) from e
            number = number.strip()
            if not number:
                raise InvalidResponder(
                    f"Window {index} ({start}-{end}): responder number is empty",
                    details={"index": index},
                )
            entry = ScheduleEntry(start=start, end=end, responder=number)
            if entry.start_time >= entry.end_time:
                logger.warning(
                    "Schedule window never matches: start is not before end",
                    extra={"start": start, "end": end, "responder": number},
                )
            new_entries.append(entry)

        if not new_entries:
            return []

        with self._lock:
            entries = self._store.load()
            entries.extend(new_entries)
            self._store.save(entries)

        logger.info(
            "Schedule windows added",
            extra={
                "added": len(new_entries),
                "total": len(entries),
                "responders": [e.responder for e in new_entries],
            },
        )
        return new_entries

    def list_schedule(self) -> list[ScheduleEntry]:
        with self._lock:
            return self._store.load()

    def schedule_size(self) -> int:
        return len(self.list_schedule())

    # ------------------------------------------------------------------
    # Lookup and rotation
    # ------------------------------------------------------------------

    def _recently_reached(self, number: str, now: datetime) -> bool:
        last_success = self._state.get_last_success(number)
        return last_success is not None and now - last_success < self._success_window

    def resolve_current_responder(self) -> str:
        """Return the first responder whose window contains the current minute.

        Responders reached successfully within the suppression window are
        skipped.

        Raises:
            NoResponderFound: If nothing matches or every match was skipped.
        """
        now = self.now()
        current = now.astimezone(self._tz).time().replace(second=0, microsecond=0)
        entries = self.list_schedule()

        for entry in entries:
            if not entry.contains(current):
                continue
            if self._recently_reached(entry.responder, now):
                logger.info(
                    "Skipping responder reached within the suppression window",
                    extra={"responder": entry.responder},
                )
                continue
            logger.info(
                "On-call responder resolved",
                extra={
                    "responder": entry.responder,
                    "window": f"{entry.start}-{entry.end}",
                    "local_time": current.strftime("%H:%M"),
                },
            )
            return entry.responder

        logger.warning(
            "No responder found for the current time",
            extra={"local_time": current.strftime("%H:%M"), "entries": len(entries)},
        )
        raise NoResponderFound(
            f"No responder on call at {current.strftime('%H:%M')}",
            details={"local_time": current.strftime("%H:%M")},
        )

    def next_responder(self, current_number: str) -> str:
        """Return the responder after the first occurrence of ``current_number``.

        Raises:
            ExhaustedRotation: If ``current_number`` is last or not scheduled.
        """
        entries = self.list_schedule()
        for index, entry in enumerate(entries):
            if entry.responder != current_number:
                continue
            if index + 1 < len(entries):
                return entries[index + 1].responder
            break

        raise ExhaustedRotation(
            f"No more numbers to call after {current_number}",
            details={"current": current_number},
        )

    # ------------------------------------------------------------------
    # Call outcomes
    # ------------------------------------------------------------------

    def record_call_success(self, number: str) -> None:
        now = self.now()
        self._state.set_last_success(number, now)
        self._state.clear_pending_attempts(number)
        logger.info(
            "Call marked successful",
            extra={"responder": number, "at": now.isoformat()},
        )

    def record_call_failure(self, number: str) -> int:
        return self._state.increment_pending_attempts(number)

    def pending_attempts(self, number: str) -> int:
        return self._state.get_pending_attempts(number)

    # ------------------------------------------------------------------
    # Mute window
    # ------------------------------------------------------------------

    @property
    def mute_until(self) -> datetime | None:
        return self._state.get_mute_until()

    def is_muted(self) -> bool:
        until = self._state.get_mute_until()
        return until is not None and self.now() < until

    def set_mute(self, duration: timedelta | None = None) -> datetime:
        """Suppress outbound calls for ``duration`` (default mute duration).

        Raises:
            InvalidCommand: If the deadline falls outside the datetime range.
        """
        duration = self._mute_duration if duration is None else duration
        try:
            until = self.now() + duration
        except OverflowError as e:
            raise InvalidCommand(
                "Mute duration is out of range",
                details={"minutes": duration.total_seconds() / 60},
            ) from e
        self._state.set_mute_until(until)
        logger.info(
            "Escalation calls muted",
            extra={"until": until.isoformat(), "minutes": duration.total_seconds() / 60},
        )
        return until

    def clear_mute(self) -> None:
        self._state.set_mute_until(None)
        logger.info("Escalation calls unmuted")
