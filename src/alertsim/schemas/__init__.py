from __future__ import annotations

from alertsim.schemas.alert import Alert, AlertStatus, parse_timestamp
from alertsim.schemas.notification import Notification
from alertsim.schemas.plan import AlertRef, Plan, Step, Template

__all__ = [
    # Alert
    "Alert",
    "AlertStatus",
    "parse_timestamp",
    # Notification
    "Notification",
    # Plan
    "Plan",
    "Step",
    "Template",
    "AlertRef",
]
