"""
Domain models for the on-call schedule.
"""

import re
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator

from alertrelay.shared.exceptions import InvalidTimeFormat

TIME_FORMAT = "%H:%M"
_TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def parse_time_of_day(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` string.

    Raises:
        InvalidTimeFormat: If ``value`` is not a valid ``HH:MM`` time.
    """
    candidate = value.strip() if isinstance(value, str) else ""
    if _TIME_PATTERN.match(candidate):
        try:
            return datetime.strptime(candidate, TIME_FORMAT).time()
        except ValueError:
            pass
    raise InvalidTimeFormat(
        f"Invalid time format {value!r}, use HH:MM",
        details={"value": value},
    )


class ScheduleEntry(BaseModel):
    """One on-call window.

    Serialised with the persisted field names (``start_time``, ``end_time``,
    ``phone_number``); constructible with either naming.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: str = Field(..., alias="start_time", description="Window start, HH:MM")
    end: str = Field(..., alias="end_time", description="Window end, HH:MM")
    responder: str = Field(..., alias="phone_number", min_length=1)

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        try:
            parse_time_of_day(v)
        except InvalidTimeFormat as e:
            raise ValueError(e.message) from e
        return v.strip()

    @property
    def start_time(self) -> time:
        return parse_time_of_day(self.start)

    @property
    def end_time(self) -> time:
        return parse_time_of_day(self.end)

    def contains(self, moment: time) -> bool:
        """Strict containment: boundary instants belong to no window."""
        return self.start_time < moment < self.end_time

    def to_record(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)
