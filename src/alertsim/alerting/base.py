from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from alertsim.schemas.alert import Alert
from alertsim.utils.exceptions import TargetConfigError


@dataclass(frozen=True)
class TargetStatus:
    """Version and configuration reported by a target."""
    address: str
    version: str
    config: str


class AlertTarget(ABC):
    """Abstract base class for alert-receiving backends."""

    address: str

    async def open(self) -> None:
        """Acquire resources reused across pushes (e.g. a connection pool)."""
        pass

    async def aclose(self) -> None:
        """Release what ``open()`` acquired. Safe to call when not open."""
        pass

    @abstractmethod
    async def push(self, alerts: Sequence[Alert]) -> None:
        """
        Push one batch of alerts to this target.

        Args:
            alerts: Alerts to send in a single call

        Raises:
            httpx.HTTPError: If the request fails or the response is not 2xx
        """
        pass

    @abstractmethod
    async def status(self) -> TargetStatus:
        """
        Query the target's version and loaded configuration.

        Raises:
            TargetQueryError: If the target cannot be queried
        """
        pass

    @abstractmethod
    def validate_config(self) -> bool:
        """
        Validate target configuration.

        Returns:
            True if configuration is valid, False otherwise
        """
        pass


def ensure_valid(target: AlertTarget) -> AlertTarget:
    """
    Return ``target`` unchanged if its configuration is valid.

    Raises:
        TargetConfigError: If ``validate_config()`` rejects it
    """
    if not target.validate_config():
        raise TargetConfigError(target.address, "invalid target configuration")
    return target
