"""Alertmanager webhook ingestion router."""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, Response, status
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from alertsim.dependencies import NotificationLogDep
from alertsim.schemas.notification import Notification

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/", status_code=status.HTTP_200_OK)
async def receive_notification(
    request: Request,
    notification_log: NotificationLogDep,
) -> Response:
    """Decode a webhook notification and store it; malformed payloads are dropped."""
    try:
        body = await request.body()
    except ClientDisconnect:
        logger.warning("notification_read_failed", error="client disconnected")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    try:
        notification = Notification.model_validate_json(body)
    except ValidationError as exc:
        logger.warning(
            "notification_decode_failed",
            error=str(exc),
            body_size=len(body),
        )
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    await notification_log.record(notification)
    return Response(status_code=status.HTTP_200_OK)
