"""Unit tests for the notification log."""
from __future__ import annotations

import asyncio

import pytest

from alertsim.schemas.notification import Notification
from alertsim.services.notification_log import NotificationLog


@pytest.mark.unit
async def test_record_stamps_receipt_time(notification_payload) -> None:
    log = NotificationLog()
    stored = await log.record(Notification.model_validate(notification_payload()))

    assert stored.timestamp is not None
    assert log.snapshot() == (stored,)


@pytest.mark.unit
async def test_same_payload_twice_is_stored_twice(notification_payload) -> None:
    log = NotificationLog()
    nf = Notification.model_validate(notification_payload())

    first = await log.record(nf)
    await asyncio.sleep(0.001)
    second = await log.record(nf)

    assert len(log) == 2
    assert first.timestamp != second.timestamp


@pytest.mark.unit
async def test_concurrent_records_are_all_kept(notification_payload) -> None:
    log = NotificationLog()
    nfs = [Notification.model_validate(notification_payload(group_key=f"g{i}")) for i in range(50)]

    await asyncio.gather(*(log.record(nf) for nf in nfs))

    assert len(log) == 50
    assert {n.group_key for n in log.snapshot()} == {f"g{i}" for i in range(50)}
