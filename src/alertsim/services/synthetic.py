"""Ad-hoc alert generation from ``key=value`` label specs."""
from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone

import structlog

from alertsim.schemas.alert import Alert, parse_timestamp
from alertsim.services.alert_builder import AlertBuilder
from alertsim.utils.durations import parse_duration

logger = structlog.get_logger(__name__)

_PAIR = re.compile(r'\s*(\w+)=(?:"?([^",]+)"?)\s*(?:,|$)')
INDEX_PLACEHOLDER = "{{i}}"


def parse_label_spec(spec: str) -> dict[str, str]:
    """
    Parse ``name=value`` pairs separated by commas.

    Values may be double-quoted and may contain the ``{{i}}`` placeholder.
    """
    return {m.group(1): m.group(2) for m in _PAIR.finditer(spec or "")}


def expand_index(i: int, values: Mapping[str, str]) -> dict[str, str]:
    """Replace ``{{i}}`` with the alert index in keys and values."""
    index = str(i)
    return {
        k.replace(INDEX_PLACEHOLDER, index): v.replace(INDEX_PLACEHOLDER, index)
        for k, v in values.items()
    }


def parse_time_bounds(
    start: str,
    end: str,
    now: datetime | None = None,
) -> tuple[datetime, datetime | None]:
    """
    Resolve start/end options into timestamps.

    ``start`` is RFC3339; anything else means now. ``end`` is RFC3339, a
    duration relative to the start, or ``now``. Any other value, including
    an unparseable one, leaves the end unset so the alerts fire.
    """
    now = now or datetime.now(timezone.utc)
    starts_at = parse_timestamp(start) or now

    end = (end or "").strip()
    if not end:
        return starts_at, None
    if end == "now":
        return starts_at, now

    ends_at = parse_timestamp(end)
    if ends_at is not None:
        return starts_at, ends_at
    try:
        return starts_at, starts_at + parse_duration(end)
    except ValueError:
        logger.warning("unparseable_end_time", value=end)
        return starts_at, None


def build_alert_slice(
    n: int,
    labels: Mapping[str, str],
    annotations: Mapping[str, str],
    start: datetime,
    end: datetime | None,
    builder: AlertBuilder | None = None,
) -> list[Alert]:
    """Create ``n`` alerts with ``{{i}}`` expanded to 0..n-1."""
    builder = builder or AlertBuilder()
    return [
        builder.create_alert(
            expand_index(i, labels), expand_index(i, annotations), start, end
        )
        for i in range(n)
    ]
