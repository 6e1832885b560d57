"""
Process-wide call state: recent successes, pending retries, mute deadline.

The scheduler talks to a ``CallStateStore`` so the in-memory default can be
swapped for a shared backend without touching escalation logic.
"""

import threading
from datetime import datetime
from typing import Protocol


class CallStateStore(Protocol):
    """Keyed access to per-responder call state and the mute deadline."""

    def get_last_success(self, number: str) -> datetime | None: ...

    def set_last_success(self, number: str, at: datetime) -> None: ...

    def get_pending_attempts(self, number: str) -> int: ...

    def increment_pending_attempts(self, number: str) -> int: ...

    def clear_pending_attempts(self, number: str) -> None: ...

    def get_mute_until(self) -> datetime | None: ...

    def set_mute_until(self, until: datetime | None) -> None: ...


class InMemoryCallStateStore:
    """Lock-protected dictionaries; entries are never evicted."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_success: dict[str, datetime] = {}
        self._pending_attempts: dict[str, int] = {}
        self._mute_until: datetime | None = None

    def get_last_success(self, number: str) -> datetime | None:
        with self._lock:
            return self._last_success.get(number)

    def set_last_success(self, number: str, at: datetime) -> None:
        with self._lock:
            self._last_success[number] = at

    def get_pending_attempts(self, number: str) -> int:
        with self._lock:
            return self._pending_attempts.get(number, 0)

    def increment_pending_attempts(self, number: str) -> int:
        with self._lock:
            count = self._pending_attempts.get(number, 0) + 1
            self._pending_attempts[number] = count
            return count

    def clear_pending_attempts(self, number: str) -> None:
        with self._lock:
            self._pending_attempts.pop(number, None)

    def get_mute_until(self) -> datetime | None:
        with self._lock:
            return self._mute_until

    def set_mute_until(self, until: datetime | None) -> None:
        with self._lock:
            self._mute_until = until
