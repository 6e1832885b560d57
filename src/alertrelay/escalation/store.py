"""
Schedule persistence.

The schedule is a JSON array of ``{start_time, end_time, phone_number}``
objects, rewritten in full on every save. Stores do no locking of their own;
callers serialise load-modify-save cycles.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from alertrelay.escalation.models import ScheduleEntry
from alertrelay.shared.exceptions import ScheduleStoreError
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)

_ENTRIES_ADAPTER = TypeAdapter(list[ScheduleEntry])


class ScheduleStore(Protocol):
    """Load/save round-trip for the ordered schedule."""

    def load(self) -> list[ScheduleEntry]:
        """Return all entries in stored order.

        Raises:
            ScheduleStoreError: If the backing store is unreadable or malformed.
        """
        ...

    def save(self, entries: Sequence[ScheduleEntry]) -> None:
        """Replace the stored schedule with ``entries``.

        Raises:
            ScheduleStoreError: If the write fails.
        """
        ...


class JsonFileScheduleStore:
    """Schedule store backed by an indented JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[ScheduleEntry]:
        if not self._path.exists():
            logger.info(
                "Schedule file does not exist, returning empty schedule",
                extra={"path": str(self._path)},
            )
            return []

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(
                "Error reading schedule file",
                extra={"path": str(self._path), "error": str(e)},
            )
            raise ScheduleStoreError(
                f"Cannot read schedule file {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e

        if not raw.strip():
            return []

        try:
            entries = _ENTRIES_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.error(
                "Malformed schedule file",
                extra={"path": str(self._path), "errors": e.error_count()},
            )
            raise ScheduleStoreError(
                f"Malformed schedule file {self._path}",
                details={"path": str(self._path), "errors": e.errors(include_url=False)},
            ) from e

        logger.debug(
            "Schedule loaded",
            extra={"path": str(self._path), "entries": len(entries)},
        )
        return entries

    def save(self, entries: Sequence[ScheduleEntry]) -> None:
        payload = json.dumps(
            [entry.to_record() for entry in entries],
            indent=2,
            ensure_ascii=False,
        )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as e:
            logger.error(
                "Error writing schedule file",
                extra={"path": str(self._path), "error": str(e)},
            )
            raise ScheduleStoreError(
                f"Cannot write schedule file {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e

        logger.info(
            "Schedule saved",
            extra={"path": str(self._path), "entries": len(entries)},
        )


class InMemoryScheduleStore:
    """Schedule store kept in process memory."""

    def __init__(self, entries: Sequence[ScheduleEntry] | None = None) -> None:
        self._lock = threading.Lock()
        self._entries: list[ScheduleEntry] = list(entries or [])

    def load(self) -> list[ScheduleEntry]:
        with self._lock:
            return list(self._entries)

    def save(self, entries: Sequence[ScheduleEntry]) -> None:
        with self._lock:
            self._entries = list(entries)
