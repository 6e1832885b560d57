"""
Exception hierarchy for the relay.

Every error carries a human readable message and a stable ``error_code``
that the HTTP layer and the command replies surface verbatim.
"""

from typing import Any


class AlertRelayError(Exception):
    """Base exception for relay errors."""

    default_code = "RELAY_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class InvalidTimeFormat(AlertRelayError):
    """A schedule time is not a valid 24-hour HH:MM value."""

    default_code = "INVALID_TIME_FORMAT"


class ScheduleStoreError(AlertRelayError):
    """The schedule file could not be read, decoded or written."""

    default_code = "SCHEDULE_IO_ERROR"


class NoResponderFound(AlertRelayError):
    """Nobody is on call (or everyone on call was recently reached)."""

    default_code = "NO_RESPONDER"


class ExhaustedRotation(AlertRelayError):
    """There is no responder after the current one."""

    default_code = "ROTATION_EXHAUSTED"


class InvalidCommand(AlertRelayError):
    """An operator command could not be parsed."""

    default_code = "INVALID_COMMAND"


class CallProviderError(AlertRelayError):
    """The outbound call provider failed or rejected a call."""

    default_code = "CALL_PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code)
        self.provider_response = provider_response or {}


class NotificationError(AlertRelayError):
    """The notification channel failed to deliver a message."""

    default_code = "NOTIFICATION_ERROR"


class UnknownSeverity(NotificationError):
    """No destination is configured for an alert severity."""

    default_code = "UNKNOWN_SEVERITY"


class InvalidResponder(AlertRelayError):
    """A schedule window has no responder number."""

    default_code = "INVALID_RESPONDER"


class AlertQueueFull(AlertRelayError):
    """The inbound alert buffer is at capacity."""

    default_code = "QUEUE_FULL"
