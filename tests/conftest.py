"""
Pytest configuration and shared fixtures.

Alertmanager is never contacted: targets are in-memory fakes or
``httpx.AsyncClient`` is patched.
"""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from alertsim.alerting.base import AlertTarget, TargetStatus
from alertsim.schemas.alert import Alert

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeTarget(AlertTarget):
    """Records every batch it receives; can fail or stall on demand."""

    def __init__(
        self,
        address: str,
        fail: bool = False,
        delay: float = 0.0,
        version: str = "0.27.0",
        config: str = "route: {}",
        valid: bool = True,
    ):
        self.address = address
        self.fail = fail
        self.delay = delay
        self.version = version
        self.config = config
        self.valid = valid
        self.batches: list[list[Alert]] = []
        self.status_calls = 0
        self.is_open = False
        self.open_calls = 0

    async def open(self) -> None:
        self.is_open = True
        self.open_calls += 1

    async def aclose(self) -> None:
        self.is_open = False

    async def push(self, alerts: Sequence[Alert]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise httpx.ConnectError("connection refused")
        self.batches.append(list(alerts))

    async def status(self) -> TargetStatus:
        self.status_calls += 1
        return TargetStatus(address=self.address, version=self.version, config=self.config)

    def validate_config(self) -> bool:
        return self.valid


class FakeClock:
    """Deterministic clock that can be advanced by tests."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_alerts():
    """Factory for ``n`` distinct firing alerts."""
    def _make(n: int) -> list[Alert]:
        return [
            Alert(labels={"alertname": "HighLatency", "instance": f"instance-{i}"}, starts_at=T0)
            for i in range(n)
        ]
    return _make


@pytest.fixture
def notification_payload():
    """Factory for Alertmanager webhook payloads."""
    def _make(group_key: str = '{}:{alertname="X"}', status: str = "firing", **extra: Any) -> dict:
        payload = {
            "version": "4",
            "groupKey": group_key,
            "truncatedAlerts": 0,
            "status": status,
            "receiver": "webhook",
            "groupLabels": {"alertname": "X"},
            "commonLabels": {"alertname": "X"},
            "commonAnnotations": {},
            "externalURL": "http://alertmanager:9093",
            "alerts": [
                {
                    "status": status,
                    "labels": {"alertname": "X"},
                    "annotations": {"summary": "x is on fire"},
                    "startsAt": "2026-01-01T12:00:00Z",
                    "endsAt": "0001-01-01T00:00:00Z",
                    "generatorURL": "http://example.com/",
                    "fingerprint": "abc123",
                }
            ],
        }
        payload.update(extra)
        return payload
    return _make


@pytest.fixture
def make_target():
    """Factory for in-memory Alertmanager targets."""
    def _make(address: str = "localhost:9093", **kwargs: Any) -> FakeTarget:
        return FakeTarget(address, **kwargs)
    return _make


@pytest.fixture
def t0() -> datetime:
    return T0
