"""
Mock call provider for tests and local runs.
"""

import threading
from collections.abc import Iterable
from datetime import datetime, timezone

from alertrelay.shared.logging import get_logger
from alertrelay.telephony.interface import (
    CallData,
    CallPlacementError,
    CallPlacementResponse,
    CallProvider,
)

logger = get_logger(__name__)


class MockCallProvider(CallProvider):
    """Records every call attempt; failures are configurable per number."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: list[CallData] = []
        self._next_call_id: int = 1
        self._should_fail: bool = False
        self._failing_numbers: set[str] = set()
        self._rejecting_numbers: set[str] = set()
        self._fail_error: str = "Mock failure"
        self._fail_code: str = "MOCK_ERROR"

    def reset(self) -> None:
        with self._lock:
            self._calls.clear()
            self._next_call_id = 1
            self._should_fail = False
            self._failing_numbers.clear()
            self._rejecting_numbers.clear()
            self._fail_error = "Mock failure"
            self._fail_code = "MOCK_ERROR"

    def configure_failure(
        self,
        should_fail: bool = True,
        numbers: Iterable[str] | None = None,
        error_message: str = "Mock failure",
        error_code: str = "MOCK_ERROR",
    ) -> None:
        """Make calls raise; limited to ``numbers`` when given."""
        with self._lock:
            if numbers is None:
                self._should_fail = should_fail
            elif should_fail:
                self._failing_numbers.update(numbers)
            else:
                self._failing_numbers.difference_update(numbers)
            self._fail_error = error_message
            self._fail_code = error_code

    def configure_rejection(self, numbers: Iterable[str]) -> None:
        """Make the provider answer "not accepted" for ``numbers``."""
        with self._lock:
            self._rejecting_numbers.update(numbers)

    @property
    def calls(self) -> list[CallData]:
        with self._lock:
            return self._calls.copy()

    @property
    def dialed_numbers(self) -> list[str]:
        return [c.number for c in self.calls]

    def get_last_call(self) -> CallData | None:
        with self._lock:
            return self._calls[-1] if self._calls else None

    def place_call_sync(self, call: CallData) -> CallPlacementResponse:
        logger.info("Mock: placing call", extra={"to": call.number})

        with self._lock:
            self._calls.append(call)

            if self._should_fail or call.number in self._failing_numbers:
                raise CallPlacementError(
                    message=self._fail_error,
                    error_code=self._fail_code,
                )

            if call.number in self._rejecting_numbers:
                return CallPlacementResponse(
                    accepted=False,
                    status_code=422,
                    created_at=datetime.now(timezone.utc),
                    raw_response={"mock": True, "number": call.number},
                )

            provider_call_id = f"MOCK_CALL_{self._next_call_id:06d}"
            self._next_call_id += 1

        return CallPlacementResponse(
            accepted=True,
            status_code=200,
            created_at=datetime.now(timezone.utc),
            provider_call_id=provider_call_id,
            raw_response={"mock": True, "provider_call_id": provider_call_id},
        )
