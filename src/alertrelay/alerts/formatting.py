"""
Human readable alert messages.

One paragraph per alert, paragraphs separated by a blank line::

    ❗️ FIRING
    🔔 Summary: Disk almost full
    📝 Description: /var is at 97%
    ⚠️ Severity: Critical
    🕒 Started at: Jan 02, 15:04:05 MSK
"""

from collections.abc import Sequence
from datetime import datetime, tzinfo

from alertrelay.alerts.models import Alert

FIRING_EMOJI = "❗️"
RESOLVED_EMOJI = "✅"
TIMESTAMP_FORMAT = "%b %d, %H:%M:%S"


def format_timestamp(moment: datetime | None, tz: tzinfo, tz_label: str) -> str:
    if moment is None:
        return "n/a"
    return f"{moment.astimezone(tz).strftime(TIMESTAMP_FORMAT)} {tz_label}"


def format_alert(alert: Alert, tz: tzinfo, tz_label: str = "MSK") -> str | None:
    """Format one alert, or return None for statuses other than firing/resolved."""
    if alert.is_firing:
        emoji = FIRING_EMOJI
    elif alert.is_resolved:
        emoji = RESOLVED_EMOJI
    else:
        return None

    lines = [
        f"{emoji} {alert.status.upper()}",
        f"🔔 Summary: {alert.annotations.summary}",
        f"📝 Description: {alert.annotations.description}",
        f"⚠️ Severity: {alert.labels.severity}",
        f"🕒 Started at: {format_timestamp(alert.starts_at, tz, tz_label)}",
    ]
    if alert.is_resolved and alert.ends_at is not None:
        lines.append(f"🕒 Resolved at: {format_timestamp(alert.ends_at, tz, tz_label)}")

    return "\n".join(lines)


def format_alert_message(
    alerts: Sequence[Alert],
    tz: tzinfo,
    tz_label: str = "MSK",
) -> str:
    """Join the formatted alerts; empty when none has a supported status."""
    paragraphs = [p for p in (format_alert(a, tz, tz_label) for a in alerts) if p]
    return "\n\n".join(paragraphs)
