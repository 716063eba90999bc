from __future__ import annotations

import asyncio
import socket
from enum import Enum

import structlog
import uvicorn

from alertsim.main import create_app
from alertsim.schemas.notification import Notification
from alertsim.services.notification_log import NotificationLog
from alertsim.utils.exceptions import ReceiverBindError, ReceiverStateError

logger = structlog.get_logger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 5.0


class ReceiverState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


def bind_listener(address: str) -> socket.socket:
    """
    Bind a listening TCP socket for ``host:port`` (empty host = all interfaces).

    Raises:
        ReceiverBindError: If the address is malformed or can't be bound
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ReceiverBindError(address, "missing port")
    try:
        port = int(port_text)
    except ValueError:
        raise ReceiverBindError(address, f"invalid port {port_text!r}") from None

    host = host.strip("[]")
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    if not host:
        host = "0.0.0.0"

    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except (OSError, OverflowError) as exc:
        sock.close()
        raise ReceiverBindError(address, str(exc)) from exc
    return sock


class WebhookReceiver:
    """
    Runs the webhook app on uvicorn and keeps the received notifications.

    Lifecycle is created -> running -> stopped; notifications can only be
    read once the receiver no longer accepts deliveries.
    """

    def __init__(
        self,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
        notification_log: NotificationLog | None = None,
    ):
        self.shutdown_timeout = shutdown_timeout
        self.notification_log = notification_log if notification_log is not None else NotificationLog()
        self.app = create_app(self.notification_log)
        self.state = ReceiverState.CREATED
        self._server: uvicorn.Server | None = None
        self._socket: socket.socket | None = None
        self._task: asyncio.Task[None] | None = None
        self._bound_address: str | None = None

    @property
    def address(self) -> str | None:
        """Actual ``host:port`` bound, useful when listening on port 0."""
        return self._bound_address

    async def start(self, address: str) -> None:
        """
        Bind ``address`` and serve in a background task.

        Raises:
            ReceiverBindError: If the listener can't be bound
            ReceiverStateError: If the receiver was already started
        """
        if self.state != ReceiverState.CREATED:
            raise ReceiverStateError(f"webhook receiver is {self.state.value}")

        self._socket = bind_listener(address)
        host, port = self._socket.getsockname()[:2]
        self._bound_address = f"{host}:{port}"
        config = uvicorn.Config(
            self.app,
            log_config=None,
            access_log=False,
            lifespan="on",
            timeout_graceful_shutdown=self.shutdown_timeout,
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[self._socket]))
        self.state = ReceiverState.RUNNING
        logger.info("webhook_receiver_listening", address=self.address)

    async def run(self, address: str) -> None:
        """Serve until ``stop()`` is called."""
        await self.start(address)
        if self._task is None:
            raise ReceiverStateError("webhook receiver did not start")
        await self._task

    async def stop(self) -> None:
        """Stop accepting deliveries, letting in-flight requests finish within the timeout."""
        if self.state != ReceiverState.RUNNING:
            logger.warning("webhook_receiver_not_running", state=self.state.value)
            return

        if self._server is None or self._task is None:
            raise ReceiverStateError("webhook receiver is running without a server")
        logger.info("stopping_webhook_receiver")
        self._server.should_exit = True
        try:
            await asyncio.wait_for(asyncio.shield(self._task), self.shutdown_timeout)
        except TimeoutError:
            logger.warning(
                "webhook_receiver_forced_shutdown",
                timeout=self.shutdown_timeout,
            )
            self._server.force_exit = True
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            if self._socket is not None:
                self._socket.close()
            self.state = ReceiverState.STOPPED

    def notifications(self) -> tuple[Notification, ...]:
        """
        Notifications received so far, in receipt order.

        Raises:
            ReceiverStateError: If the receiver is still running
        """
        if self.state == ReceiverState.RUNNING:
            raise ReceiverStateError("stop the webhook receiver before reading notifications")
        return self.notification_log.snapshot()
