"""Unit tests for AlertBuilder."""
from __future__ import annotations

from datetime import timedelta

import pytest

from alertsim.services.alert_builder import DEFAULT_GENERATOR_URL, AlertBuilder


@pytest.mark.unit
def test_create_alert_fields(t0) -> None:
    builder = AlertBuilder("http://generator.local/")
    alert = builder.create_alert(
        {"alertname": "X"}, {"summary": "s"}, t0, t0 + timedelta(minutes=3)
    )
    assert alert.labels == {"alertname": "X"}
    assert alert.annotations == {"summary": "s"}
    assert alert.starts_at == t0
    assert alert.ends_at == t0 + timedelta(minutes=3)
    assert alert.generator_url == "http://generator.local/"


@pytest.mark.unit
def test_default_generator_url(t0) -> None:
    alert = AlertBuilder().create_alert({}, {}, t0, None)
    assert alert.generator_url == DEFAULT_GENERATOR_URL
    assert alert.ends_at is None


@pytest.mark.unit
def test_labels_are_copied(t0) -> None:
    labels = {"alertname": "X"}
    annotations = {"summary": "before"}
    alert = AlertBuilder().create_alert(labels, annotations, t0, None)

    labels["alertname"] = "Y"
    annotations["summary"] = "after"

    assert alert.labels == {"alertname": "X"}
    assert alert.annotations == {"summary": "before"}


@pytest.mark.unit
def test_missing_start_defaults_to_creation_time() -> None:
    alert = AlertBuilder().create_alert({}, {}, None, None)
    assert alert.starts_at is not None
