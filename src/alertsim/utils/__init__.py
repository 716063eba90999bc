from __future__ import annotations

from alertsim.utils.durations import format_duration, parse_duration
from alertsim.utils.exceptions import (
    AlertSimException,
    PlanError,
    ReceiverBindError,
    ReceiverStateError,
    TargetConfigError,
    TargetQueryError,
)
from alertsim.utils.logging import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "parse_duration",
    "format_duration",
    "AlertSimException",
    "TargetConfigError",
    "TargetQueryError",
    "PlanError",
    "ReceiverBindError",
    "ReceiverStateError",
]
