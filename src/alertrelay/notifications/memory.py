"""
In-memory notification channel for tests and dry runs.
"""

import threading

from alertrelay.notifications.interface import NotificationChannel


class InMemoryChannel(NotificationChannel):
    """Keeps delivered chunks as (destination, text) pairs."""

    def __init__(self, destinations: dict[str, str] | None = None) -> None:
        super().__init__(destinations or {"Warning": "warning", "Critical": "critical"})
        self._lock = threading.Lock()
        self._sent: list[tuple[str, str]] = []

    @property
    def sent(self) -> list[tuple[str, str]]:
        with self._lock:
            return self._sent.copy()

    def messages_for(self, destination: str) -> list[str]:
        return [text for dest, text in self.sent if dest == destination]

    def send_chunk(self, destination: str, text: str) -> None:
        with self._lock:
            self._sent.append((destination, text))

    def reset(self) -> None:
        with self._lock:
            self._sent.clear()
