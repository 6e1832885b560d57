"""
Alertmanager webhook payload models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ALERT_GROUP = "NoAlertGroup"


class AlertStatus(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


class Severity(str, Enum):
    WARNING = "Warning"
    CRITICAL = "Critical"


class AlertLabels(BaseModel):
    """Labels the relay reads; any other label is ignored."""

    model_config = ConfigDict(populate_by_name=True)

    alertname: str = ""
    severity: str = ""
    error_message: str = Field(default="", alias="errorMessage")
    strategy_name: str = Field(default="", alias="strategyName")
    alert_group: str = Field(default="", alias="alertgroup")
    name: str = ""


class AlertAnnotations(BaseModel):
    summary: str = ""
    description: str = ""


class Alert(BaseModel):
    """A single alert from an Alertmanager notification."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    labels: AlertLabels = Field(default_factory=AlertLabels)
    annotations: AlertAnnotations = Field(default_factory=AlertAnnotations)
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")

    @field_validator("starts_at", "ends_at")
    @classmethod
    def drop_zero_time(cls, v: datetime | None) -> datetime | None:
        # Alertmanager sends 0001-01-01T00:00:00Z for "not set"
        if v is not None and v.year <= 1:
            return None
        return v

    @property
    def group_key(self) -> str:
        return self.labels.alert_group or DEFAULT_ALERT_GROUP

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING.value

    @property
    def is_resolved(self) -> bool:
        return self.status == AlertStatus.RESOLVED.value

    @property
    def is_critical(self) -> bool:
        return self.labels.severity == Severity.CRITICAL.value


class AlertManagerMessage(BaseModel):
    """Webhook body: ``{"alerts": [...]}``; other top-level keys are ignored."""

    alerts: list[Alert] = Field(default_factory=list)
