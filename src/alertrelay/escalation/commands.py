"""
Operator commands for the escalation engine.

Commands arrive as plain text from any front-end (Telegram chat, admin API):

    set_schedule <HH:MM> <HH:MM> <responder> [<HH:MM> <HH:MM> <responder> ...]
    mute [minutes]
    unmute
    schedule

A leading ``/`` and a ``@botname`` suffix on the command word are ignored.
"""

from __future__ import annotations

from datetime import timedelta

from alertrelay.escalation.scheduler import MAX_MUTE_MINUTES, EscalationScheduler
from alertrelay.shared.exceptions import AlertRelayError, InvalidCommand
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)

SET_SCHEDULE_USAGE = "Usage: set_schedule <HH:MM> <HH:MM> <responder> [...]"
MUTE_USAGE = f"Usage: mute [minutes], at most {MAX_MUTE_MINUTES}"


def _command_word(token: str) -> str:
    return token.lstrip("/").split("@", 1)[0].lower()


class CommandHandler:
    """Parses operator text and applies it to the scheduler."""

    def __init__(self, scheduler: EscalationScheduler, tz_label: str = "MSK") -> None:
        self._scheduler = scheduler
        self._tz_label = tz_label

    def handle(self, text: str) -> str:
        """Execute ``text`` and return the reply for the operator.

        Raises:
            InvalidCommand: If the text is not a known, well-formed command.
            InvalidTimeFormat: If a schedule window has a bad time.
            ScheduleStoreError: If the schedule cannot be persisted.
        """
        tokens = text.split()
        if not tokens:
            raise InvalidCommand("Empty command")

        command, args = _command_word(tokens[0]), tokens[1:]
        logger.info("Operator command received", extra={"command": command, "arg_count": len(args)})

        if command == "set_schedule":
            return self._set_schedule(args)
        if command == "mute":
            return self._mute(args)
        if command == "unmute":
            self._scheduler.clear_mute()
            return "Calls unmuted."
        if command == "schedule":
            return self._describe_schedule()

        raise InvalidCommand(
            f"Unknown command: {command}",
            details={"command": command},
        )

    def handle_safely(self, text: str) -> str:
        """Like ``handle`` but turns relay errors into a reply text."""
        try:
            return self.handle(text)
        except AlertRelayError as e:
            logger.warning(
                "Operator command rejected",
                extra={"error_code": e.error_code, "error": e.message},
            )
            return f"Error: {e.message}"

    def _set_schedule(self, args: list[str]) -> str:
        if not args or len(args) % 3 != 0:
            raise InvalidCommand(SET_SCHEDULE_USAGE)

        windows = [(args[i], args[i + 1], args[i + 2]) for i in range(0, len(args), 3)]
        entries = self._scheduler.add_schedules(windows)
        lines = [f"{e.start}-{e.end}: {e.responder}" for e in entries]
        return "Schedule saved successfully.\n" + "\n".join(lines)

    def _mute(self, args: list[str]) -> str:
        duration: timedelta | None = None
        if len(args) > 1:
            raise InvalidCommand(MUTE_USAGE)
        if args:
            try:
                minutes = int(args[0])
            except ValueError as e:
                raise InvalidCommand(MUTE_USAGE) from e
            if not 0 < minutes <= MAX_MUTE_MINUTES:
                raise InvalidCommand(MUTE_USAGE)
            duration = timedelta(minutes=minutes)

        until = self._scheduler.set_mute(duration)
        local_until = until.astimezone(self._scheduler.tz)
        return f"Calls muted until {local_until.strftime('%H:%M')} {self._tz_label}."

    def _describe_schedule(self) -> str:
        entries = self._scheduler.list_schedule()
        if not entries:
            return "Schedule is empty."
        lines = [f"{i}. {e.start}-{e.end}: {e.responder}" for i, e in enumerate(entries, start=1)]
        if self._scheduler.is_muted():
            until = self._scheduler.mute_until
            if until is not None:
                local_until = until.astimezone(self._scheduler.tz)
                lines.append(f"Calls muted until {local_until.strftime('%H:%M')} {self._tz_label}.")
        return "\n".join(lines)
