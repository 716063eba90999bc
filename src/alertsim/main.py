from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from alertsim.api import webhook
from alertsim.services.notification_log import NotificationLog

logger = structlog.get_logger(__name__)


def create_app(notification_log: NotificationLog | None = None) -> FastAPI:
    """
    Build the webhook receiver application.

    Notifications POSTed to ``/`` are appended to ``notification_log``
    (a fresh one when not given), reachable as ``app.state.notification_log``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("webhook_receiver_startup")
        yield
        logger.info(
            "webhook_receiver_shutdown",
            notification_count=len(app.state.notification_log),
        )

    app = FastAPI(
        title="Alertmanager Webhook Receiver",
        description="Collects notifications emitted while alerts are replayed",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    if notification_log is None:
        notification_log = NotificationLog()
    app.state.notification_log = notification_log

    app.include_router(webhook.router, tags=["webhook"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
