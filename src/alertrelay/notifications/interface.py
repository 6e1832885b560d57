"""
Notification channel interface.

A channel knows which destination serves each severity and can deliver text
to a destination. Long texts are split before delivery.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from alertrelay.shared.exceptions import UnknownSeverity

MAX_MESSAGE_LENGTH = 4096


def split_long_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split ``message`` into chunks of at most ``limit`` characters.

    Chunks break at the last newline before the limit; the newline starts
    the next chunk. Without a newline the chunk is cut at the limit.
    """
    if len(message) <= limit:
        return [message]

    chunks: list[str] = []
    while len(message) > limit:
        split_index = message.rfind("\n", 0, limit + 1)
        if split_index <= 0:
            split_index = limit
        chunks.append(message[:split_index])
        message = message[split_index:]
    chunks.append(message)
    return chunks


class NotificationChannel(ABC):
    """Abstract notification channel keyed by severity."""

    def __init__(self, destinations: Mapping[str, str]) -> None:
        self._destinations = dict(destinations)

    def destination_for(self, severity: str) -> str:
        """Return the destination for ``severity``.

        Raises:
            UnknownSeverity: If no destination is configured.
        """
        destination = self._destinations.get(severity)
        if not destination:
            raise UnknownSeverity(
                f"Unknown severity level: {severity!r}",
                details={"severity": severity},
            )
        return destination

    def send_message(self, destination: str, text: str) -> None:
        """Deliver ``text`` to ``destination``, split into chunks if needed."""
        for chunk in split_long_message(text):
            self.send_chunk(destination, chunk)

    @abstractmethod
    def send_chunk(self, destination: str, text: str) -> None:
        """Deliver a single chunk that already fits the length limit.

        Raises:
            NotificationError: On delivery failure.
        """
        ...

    def close(self) -> None:
        """Release transport resources."""
