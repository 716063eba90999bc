"""Unit tests for Pydantic v2 schemas."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from alertsim.schemas.alert import Alert, AlertStatus, parse_timestamp
from alertsim.schemas.notification import Notification
from alertsim.schemas.plan import Plan, Step, Template


# ── parse_timestamp ───────────────────────────────────────────────────────────

@pytest.mark.unit
def test_parse_timestamp_rfc3339_utc() -> None:
    ts = parse_timestamp("2026-01-01T12:00:00Z")
    assert ts == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)


@pytest.mark.unit
def test_parse_timestamp_with_offset_and_nanoseconds() -> None:
    ts = parse_timestamp("2026-01-01T14:00:00.123456789+02:00")
    assert ts is not None
    assert ts.astimezone(timezone.utc).hour == 12


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "0001-01-01T00:00:00Z", "not a time", 42])
def test_parse_timestamp_unset(value) -> None:
    assert parse_timestamp(value) is None


@pytest.mark.unit
def test_parse_timestamp_naive_is_utc() -> None:
    ts = parse_timestamp(datetime(2026, 1, 1, 12))
    assert ts is not None and ts.tzinfo == timezone.utc


# ── Alert ─────────────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_alert_defaults_start_to_now() -> None:
    before = datetime.now(timezone.utc)
    a = Alert(labels={"alertname": "X"})
    assert a.starts_at >= before
    assert a.ends_at is None
    assert a.status == AlertStatus.FIRING
    assert a.resolved is False


@pytest.mark.unit
def test_alert_none_start_defaults_to_now() -> None:
    a = Alert(starts_at=None)
    assert a.starts_at is not None


@pytest.mark.unit
def test_alert_resolved_when_end_not_before_start(t0) -> None:
    assert Alert(starts_at=t0, ends_at=t0 + timedelta(minutes=1)).resolved is True
    assert Alert(starts_at=t0, ends_at=t0).resolved is True
    assert Alert(starts_at=t0, ends_at=t0 - timedelta(seconds=1)).resolved is False


@pytest.mark.unit
def test_alert_decodes_camel_case_and_zero_end() -> None:
    a = Alert.model_validate(
        {
            "labels": {"alertname": "X"},
            "startsAt": "2026-01-01T12:00:00Z",
            "endsAt": "0001-01-01T00:00:00Z",
            "generatorURL": "http://prometheus/graph",
            "fingerprint": "ignored",
        }
    )
    assert a.ends_at is None
    assert a.generator_url == "http://prometheus/graph"


@pytest.mark.unit
def test_alert_postable_omits_unset_end(t0) -> None:
    firing = Alert(labels={"a": "b"}, starts_at=t0).to_postable()
    resolved = Alert(labels={"a": "b"}, starts_at=t0, ends_at=t0 + timedelta(minutes=3)).to_postable()
    assert "endsAt" not in firing
    assert firing["startsAt"] == "2026-01-01T12:00:00Z"
    assert resolved["endsAt"] == "2026-01-01T12:03:00Z"


@pytest.mark.unit
def test_alert_is_immutable(t0) -> None:
    a = Alert(starts_at=t0)
    with pytest.raises(ValidationError):
        a.ends_at = t0


# ── Notification ──────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_notification_decodes_webhook_payload(notification_payload) -> None:
    nf = Notification.model_validate(notification_payload(group_key="gk-1"))
    assert nf.group_key == "gk-1"
    assert nf.status == "firing"
    assert nf.receiver == "webhook"
    assert nf.external_url == "http://alertmanager:9093"
    assert nf.common_labels == {"alertname": "X"}
    assert len(nf.alerts) == 1
    assert nf.alerts[0].ends_at is None


@pytest.mark.unit
def test_notification_ignores_client_timestamp(notification_payload) -> None:
    nf = Notification.model_validate(notification_payload(timestamp="2020-01-01T00:00:00Z"))
    assert nf.timestamp is None


@pytest.mark.unit
def test_notification_received_stamps_copy(notification_payload, t0) -> None:
    nf = Notification.model_validate(notification_payload())
    stamped = nf.received(t0)
    assert stamped.timestamp == t0
    assert nf.timestamp is None


@pytest.mark.unit
def test_notification_null_collections() -> None:
    nf = Notification.model_validate({"groupKey": "g", "alerts": None, "commonLabels": None})
    assert nf.alerts == []
    assert nf.common_labels == {}


@pytest.mark.unit
def test_notification_rejects_non_object() -> None:
    with pytest.raises(ValidationError):
        Notification.model_validate_json(b"[1, 2, 3]")


# ── Plan ──────────────────────────────────────────────────────────────────────

@pytest.mark.unit
def test_step_defaults() -> None:
    s = Step()
    assert s.runs == 1
    assert s.repeat == timedelta(0)
    assert s.alerts == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "repeat,expected",
    [("10s", timedelta(seconds=10)), ("1m30s", timedelta(seconds=90)), (5, timedelta(seconds=5)), (None, timedelta(0))],
)
def test_step_repeat_parsing(repeat, expected) -> None:
    assert Step(repeat=repeat).repeat == expected


@pytest.mark.unit
def test_step_rejects_non_positive_runs() -> None:
    with pytest.raises(ValidationError):
        Step(runs=0)


@pytest.mark.unit
def test_alert_ref_status_defaults_to_firing() -> None:
    plan = Plan.model_validate({"steps": [{"alerts": [{"ref": "a"}, {"ref": "b", "status": None}]}]})
    assert [a.status for a in plan.steps[0].alerts] == [AlertStatus.FIRING, AlertStatus.FIRING]


@pytest.mark.unit
def test_alert_ref_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        Plan.model_validate({"steps": [{"alerts": [{"ref": "a", "status": "pending"}]}]})


@pytest.mark.unit
def test_plan_rejects_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        Plan.model_validate({"templates": {}, "stepz": []})


@pytest.mark.unit
def test_template_stringifies_yaml_scalars() -> None:
    t = Template.model_validate({"labels": {"severity": 1, "page": True}})
    assert t.labels == {"severity": "1", "page": "True"}


@pytest.mark.unit
def test_template_unparseable_end_is_unset() -> None:
    # An end time that can't be parsed leaves the alert firing rather than resolving it.
    t = Template.model_validate({"startsAt": "2026-01-01T12:00:00Z", "endsAt": "tomorrow-ish"})
    assert t.starts_at is not None
    assert t.ends_at is None
