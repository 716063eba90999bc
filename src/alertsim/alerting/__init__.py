from __future__ import annotations

from alertsim.alerting.alertmanager import AlertmanagerTarget, parse_target_address
from alertsim.alerting.base import AlertTarget, TargetStatus, ensure_valid

__all__ = [
    "AlertTarget",
    "TargetStatus",
    "ensure_valid",
    "AlertmanagerTarget",
    "parse_target_address",
]
