from __future__ import annotations

from alertsim.services.alert_builder import AlertBuilder
from alertsim.services.notification_log import NotificationLog
from alertsim.services.plan_interpreter import (
    PlanInterpreter,
    TemplateStore,
    load_plan,
    parse_plan,
)
from alertsim.services.reconciler import (
    NotificationGroup,
    Report,
    bucket,
    build_report,
    derive_alert_status,
)

__all__ = [
    "AlertBuilder",
    "NotificationLog",
    "PlanInterpreter",
    "TemplateStore",
    "load_plan",
    "parse_plan",
    "bucket",
    "build_report",
    "derive_alert_status",
    "NotificationGroup",
    "Report",
]
