"""
Outbound call provider interface definition.

The escalation engine only needs one capability from a provider: place a
call to a number and report whether the provider accepted it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

import anyio

from alertrelay.shared.exceptions import CallProviderError


@dataclass(frozen=True)
class CallData:
    """Payload submitted for a single call attempt."""

    number: str
    line_number: str
    sip_id: str

    def with_number(self, number: str) -> "CallData":
        return replace(self, number=number)

    def to_payload(self) -> dict[str, str]:
        """Wire representation expected by the quick-call endpoint."""
        return {
            "number": self.number,
            "lineNumber": self.line_number,
            "sipId": self.sip_id,
        }


@dataclass(frozen=True)
class CallPlacementResponse:
    """Provider acknowledgement of a call placement."""

    accepted: bool
    status_code: int
    created_at: datetime
    provider_call_id: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


class CallPlacementError(CallProviderError):
    """Error while placing an outbound call."""


class CallProvider(ABC):
    """Abstract interface for outbound call providers.

    ``place_call_sync`` is the source of truth; the escalation controller runs
    in worker threads and calls it directly. ``place_call`` is provided for
    async callers.
    """

    async def place_call(self, call: CallData) -> CallPlacementResponse:
        """Place a call from async code by delegating to a worker thread."""
        return await anyio.to_thread.run_sync(self.place_call_sync, call)

    @abstractmethod
    def place_call_sync(self, call: CallData) -> CallPlacementResponse:
        """Place an outbound call.

        Raises:
            CallPlacementError: If the provider cannot be reached or errors.
        """
        ...

    def close(self) -> None:
        """Release transport resources."""
