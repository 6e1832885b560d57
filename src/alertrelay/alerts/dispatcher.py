"""
Alert grouping and dispatch.

A batch is partitioned by alert group, each group is split into firing and
resolved subsets, and every non-empty subset becomes one message to the
destination of its first alert's severity. Firing messages go out before
resolved ones. Each critical firing alert then triggers one escalation;
several critical alerts in one batch mean several escalations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import tzinfo

from alertrelay.alerts.formatting import format_alert_message
from alertrelay.alerts.models import Alert
from alertrelay.escalation.controller import CallAttemptController, EscalationResult
from alertrelay.notifications.interface import NotificationChannel
from alertrelay.shared.exceptions import NotificationError
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)

GroupedAlerts = dict[str, list[Alert]]


@dataclass
class DispatchReport:
    """What happened to one batch."""

    messages_sent: int = 0
    failed_groups: list[str] = field(default_factory=list)
    escalations: list[EscalationResult] = field(default_factory=list)

    @property
    def failed_escalations(self) -> list[EscalationResult]:
        return [r for r in self.escalations if not r.ok]


def group_alerts(alerts: Sequence[Alert]) -> GroupedAlerts:
    """Partition by group key, keeping first-seen order."""
    groups: GroupedAlerts = {}
    for alert in alerts:
        groups.setdefault(alert.group_key, []).append(alert)
    return groups


def separate_by_status(groups: GroupedAlerts) -> tuple[GroupedAlerts, GroupedAlerts]:
    """Split every group into firing and resolved subsets; other statuses drop out."""
    firing: GroupedAlerts = {}
    resolved: GroupedAlerts = {}
    for key, group in groups.items():
        for alert in group:
            if alert.is_firing:
                firing.setdefault(key, []).append(alert)
            elif alert.is_resolved:
                resolved.setdefault(key, []).append(alert)
    return firing, resolved


class AlertDispatcher:
    """Routes formatted alert groups to the channel and escalates critical ones."""

    def __init__(
        self,
        channel: NotificationChannel,
        controller: CallAttemptController,
        tz: tzinfo,
        tz_label: str = "MSK",
    ) -> None:
        self._channel = channel
        self._controller = controller
        self._tz = tz
        self._tz_label = tz_label

    def dispatch(self, alerts: Sequence[Alert]) -> DispatchReport:
        report = DispatchReport()
        if not alerts:
            return report

        firing, resolved = separate_by_status(group_alerts(alerts))
        logger.info(
            "Dispatching alert batch",
            extra={
                "alerts": len(alerts),
                "firing_groups": len(firing),
                "resolved_groups": len(resolved),
            },
        )

        self._send_groups(firing, report)
        self._send_groups(resolved, report)

        for group in firing.values():
            for alert in group:
                if not alert.is_critical:
                    continue
                result = self._controller.escalate()
                report.escalations.append(result)
                if not result.ok:
                    logger.error(
                        "Escalation for critical alert failed",
                        extra={
                            "alertname": alert.labels.alertname,
                            "alert_group": alert.group_key,
                            "error": result.error.message if result.error else None,
                        },
                    )

        return report

    def _send_groups(self, groups: GroupedAlerts, report: DispatchReport) -> None:
        for key, group in groups.items():
            if not group:
                continue
            severity = group[0].labels.severity
            text = format_alert_message(group, self._tz, self._tz_label)
            if not text:
                logger.warning(
                    "Unsupported alert status",
                    extra={"alert_group": key, "status": group[0].status},
                )
                continue
            try:
                destination = self._channel.destination_for(severity)
                self._channel.send_message(destination, text)
            except NotificationError as e:
                logger.error(
                    "Error sending alert group",
                    extra={
                        "alert_group": key,
                        "severity": severity,
                        "error_code": e.error_code,
                        "error": e.message,
                    },
                )
                report.failed_groups.append(key)
                continue
            report.messages_sent += 1
