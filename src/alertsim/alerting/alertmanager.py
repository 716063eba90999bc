from __future__ import annotations

from collections.abc import Sequence

import httpx
import structlog

from alertsim.alerting.base import AlertTarget, TargetStatus
from alertsim.schemas.alert import Alert
from alertsim.utils.exceptions import TargetConfigError, TargetQueryError

logger = structlog.get_logger(__name__)

API_VERSIONS = ("v1", "v2")


def parse_target_address(address: str) -> httpx.URL:
    """
    Turn a ``host:port`` (or full http URL) into a base URL.

    Raises:
        TargetConfigError: If the address is malformed
    """
    text = address.strip()
    if not text:
        raise TargetConfigError(address, "empty address")
    if any(c.isspace() for c in text):
        raise TargetConfigError(address, "address contains whitespace")
    if "://" not in text:
        text = f"http://{text}"

    try:
        url = httpx.URL(text)
    except httpx.InvalidURL as exc:
        raise TargetConfigError(address, str(exc)) from exc

    if url.scheme not in ("http", "https"):
        raise TargetConfigError(address, f"unsupported scheme {url.scheme!r}")
    if not url.host:
        raise TargetConfigError(address, "missing host")
    if url.port is not None and not 0 < url.port < 65536:
        raise TargetConfigError(address, f"invalid port {url.port}")
    return url


class AlertmanagerTarget(AlertTarget):
    """Push alerts to an Alertmanager instance over its HTTP API."""

    def __init__(self, address: str, api_version: str = "v2", timeout: float = 10.0):
        if api_version not in API_VERSIONS:
            raise TargetConfigError(address, f"unknown API version {api_version!r}")
        self.address = address
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = str(parse_target_address(address)).rstrip("/")
        self._client: httpx.AsyncClient | None = None

    @property
    def alerts_url(self) -> str:
        return f"{self.base_url}/api/{self.api_version}/alerts"

    @property
    def status_url(self) -> str:
        return f"{self.base_url}/api/{self.api_version}/status"

    def validate_config(self) -> bool:
        """Validate target configuration."""
        return bool(self.base_url) and self.api_version in API_VERSIONS

    async def open(self) -> None:
        """Keep one client, and its connections, until ``aclose()``."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def push(self, alerts: Sequence[Alert]) -> None:
        """
        Send alerts to Alertmanager.

        Uses the open client if there is one, otherwise a one-off client.
        Any 2xx status is a success; everything else raises.
        """
        payload = [alert.to_postable() for alert in alerts]
        if self._client is not None:
            response = await self._client.post(self.alerts_url, json=payload)
            response.raise_for_status()
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.alerts_url, json=payload)
                response.raise_for_status()

        logger.debug(
            "alerts_pushed",
            target=self.address,
            alert_count=len(alerts),
            status_code=response.status_code,
        )

    async def status(self) -> TargetStatus:
        """Query version and configuration from the status endpoint."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.status_url)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TargetQueryError(self.address, str(exc)) from exc

        try:
            if self.api_version == "v1":
                data = body["data"]
                version = data["versionInfo"]["version"]
                config = data["configYAML"]
            else:
                version = body["versionInfo"]["version"]
                config = body["config"]["original"]
        except (KeyError, TypeError) as exc:
            raise TargetQueryError(
                self.address, f"unexpected status payload: missing {exc}"
            ) from exc

        return TargetStatus(address=self.address, version=version, config=config)

    async def version(self) -> str:
        return (await self.status()).version

    async def configuration(self) -> str:
        return (await self.status()).config

    def __repr__(self) -> str:
        return f"AlertmanagerTarget({self.address!r}, api_version={self.api_version!r})"
