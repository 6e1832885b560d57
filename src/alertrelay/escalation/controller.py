"""
Call attempt controller.

Drives one escalation through the state machine::

    SELECT_RESPONDER -> DIAL -> {SUCCESS, RETRY, ROTATE}
        -> DIAL | TERMINAL_FAILURE | TERMINAL_SUCCESS

Each responder gets ``max_attempts`` dials before rotating to the next
scheduled responder. The whole chain is capped at
``max_attempts * len(schedule)`` dials so repeated numbers in the schedule
cannot make rotation cycle forever.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from alertrelay.escalation.scheduler import EscalationScheduler
from alertrelay.shared.exceptions import (
    AlertRelayError,
    CallProviderError,
    ExhaustedRotation,
    NoResponderFound,
    ScheduleStoreError,
)
from alertrelay.shared.logging import get_logger
from alertrelay.telephony.interface import CallData, CallProvider

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class EscalationState(str, Enum):
    """States of a single escalation run."""

    SELECT_RESPONDER = "select_responder"
    DIAL = "dial"
    SUCCESS = "success"
    RETRY = "retry"
    ROTATE = "rotate"
    TERMINAL_SUCCESS = "terminal_success"
    TERMINAL_FAILURE = "terminal_failure"


class EscalationOutcome(str, Enum):
    """How an escalation ended."""

    SUCCEEDED = "succeeded"
    MUTED = "muted"
    FAILED = "failed"


@dataclass(frozen=True)
class CallAttemptRecord:
    """One dial of one responder."""

    number: str
    attempt: int
    accepted: bool
    error: str | None = None


@dataclass(frozen=True)
class EscalationResult:
    """Terminal result reported to the caller."""

    outcome: EscalationOutcome
    responder: str | None = None
    attempts: tuple[CallAttemptRecord, ...] = field(default_factory=tuple)
    error: AlertRelayError | None = None

    @property
    def ok(self) -> bool:
        """False only for terminal failures; a muted no-op counts as ok."""
        return self.outcome != EscalationOutcome.FAILED

    @property
    def dialed_numbers(self) -> list[str]:
        return [a.number for a in self.attempts]


class CallAttemptController:
    """Places escalation calls with bounded retries and rotation."""

    def __init__(
        self,
        scheduler: EscalationScheduler,
        provider: CallProvider,
        line_number: str,
        sip_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._scheduler = scheduler
        self._provider = provider
        self._line_number = line_number
        self._sip_id = sip_id
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def escalate(self) -> EscalationResult:
        """Run one escalation to a terminal state.

        Never raises for expected failures (nobody on call, provider errors,
        exhausted rotation, an unreadable schedule); those come back as
        ``FAILED`` results.
        """
        if self._scheduler.is_muted():
            logger.info(
                "Escalation suppressed: calls are muted",
                extra={"muted_until": str(self._scheduler.mute_until)},
            )
            return EscalationResult(outcome=EscalationOutcome.MUTED)

        try:
            number = self._scheduler.resolve_current_responder()
            budget = self._max_attempts * max(1, self._scheduler.schedule_size())
        except (NoResponderFound, ScheduleStoreError) as e:
            return self._fail(e, attempts=[], number=None)

        call = CallData(number=number, line_number=self._line_number, sip_id=self._sip_id)
        attempts: list[CallAttemptRecord] = []
        per_number = 0
        state = EscalationState.DIAL

        while True:
            if state == EscalationState.DIAL:
                if len(attempts) >= budget:
                    return self._fail(
                        ExhaustedRotation(
                            f"Attempt budget of {budget} calls spent",
                            details={"budget": budget},
                        ),
                        attempts=attempts,
                        number=call.number,
                    )
                per_number += 1
                record = self._dial(call, per_number)
                attempts.append(record)
                state = EscalationState.SUCCESS if record.accepted else EscalationState.RETRY

            elif state == EscalationState.SUCCESS:
                self._scheduler.record_call_success(call.number)
                state = EscalationState.TERMINAL_SUCCESS

            elif state == EscalationState.TERMINAL_SUCCESS:
                logger.info(
                    "Escalation call placed",
                    extra={"responder": call.number, "attempts": len(attempts)},
                )
                return EscalationResult(
                    outcome=EscalationOutcome.SUCCEEDED,
                    responder=call.number,
                    attempts=tuple(attempts),
                )

            elif state == EscalationState.RETRY:
                pending = self._scheduler.record_call_failure(call.number)
                if per_number < self._max_attempts:
                    logger.info(
                        "Retrying responder",
                        extra={
                            "responder": call.number,
                            "attempt": per_number,
                            "pending_attempts": pending,
                        },
                    )
                    state = EscalationState.DIAL
                else:
                    state = EscalationState.ROTATE

            elif state == EscalationState.ROTATE:
                try:
                    next_number = self._scheduler.next_responder(call.number)
                except (ExhaustedRotation, ScheduleStoreError) as e:
                    return self._fail(e, attempts=attempts, number=call.number)
                logger.info(
                    "Rotating to next responder",
                    extra={"from": call.number, "to": next_number},
                )
                call = call.with_number(next_number)
                per_number = 0
                state = EscalationState.DIAL

    def _dial(self, call: CallData, attempt: int) -> CallAttemptRecord:
        try:
            response = self._provider.place_call_sync(call)
        except CallProviderError as e:
            logger.warning(
                "Call attempt failed",
                extra={
                    "responder": call.number,
                    "attempt": attempt,
                    "error_code": e.error_code,
                    "error": e.message,
                },
            )
            return CallAttemptRecord(call.number, attempt, accepted=False, error=e.message)

        if not response.accepted:
            logger.warning(
                "Call attempt not accepted by provider",
                extra={
                    "responder": call.number,
                    "attempt": attempt,
                    "status_code": response.status_code,
                },
            )
            return CallAttemptRecord(
                call.number,
                attempt,
                accepted=False,
                error=f"provider answered {response.status_code}",
            )

        return CallAttemptRecord(call.number, attempt, accepted=True)

    def _fail(
        self,
        error: AlertRelayError,
        attempts: list[CallAttemptRecord],
        number: str | None,
    ) -> EscalationResult:
        logger.error(
            "Escalation failed",
            extra={
                "state": EscalationState.TERMINAL_FAILURE.value,
                "error_code": error.error_code,
                "error": error.message,
                "last_responder": number,
                "attempts": len(attempts),
            },
        )
        return EscalationResult(
            outcome=EscalationOutcome.FAILED,
            responder=number,
            attempts=tuple(attempts),
            error=error,
        )
