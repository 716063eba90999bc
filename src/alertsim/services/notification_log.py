from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import structlog

from alertsim.schemas.notification import Notification

logger = structlog.get_logger(__name__)


class NotificationLog:
    """Append-only record of notifications received from Alertmanager."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._notifications: list[Notification] = []

    async def record(self, notification: Notification) -> Notification:
        """Stamp the notification with its receipt time and append it."""
        async with self._lock:
            stored = notification.received(datetime.now(timezone.utc))
            self._notifications.append(stored)

        logger.info(
            "received_notification",
            group_key=stored.group_key,
            status=stored.status,
            alert_count=len(stored.alerts),
        )
        return stored

    def snapshot(self) -> tuple[Notification, ...]:
        return tuple(self._notifications)

    def __len__(self) -> int:
        return len(self._notifications)
