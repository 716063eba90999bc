from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from alertsim.services.notification_log import NotificationLog


def get_notification_log(request: Request) -> NotificationLog:
    """Dependency to get the receiver's notification log."""
    return request.app.state.notification_log


NotificationLogDep = Annotated[NotificationLog, Depends(get_notification_log)]
