from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Go's zero time, which Alertmanager emits for an unset endsAt.
ZERO_TIME_PREFIX = "0001-01-01T00:00:00"
_FRACTION = re.compile(r"(\.\d{6})\d+")


class AlertStatus(str, Enum):
    """Alert lifecycle states."""

    FIRING = "firing"
    RESOLVED = "resolved"


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an RFC3339 timestamp leniently.

    Zero times, empty strings and unparseable values all map to ``None``
    (unset). Naive datetimes are assumed to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text or text.startswith(ZERO_TIME_PREFIX):
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(r"\1", text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.year <= 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Alert(BaseModel):
    """
    A labeled event with a firing/resolved lifecycle.

    ``ends_at`` is ``None`` while the alert fires without a known end and
    holds a concrete time once resolved (or once an expiry is scheduled).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="startsAt"
    )
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")

    @field_validator("starts_at", mode="before")
    @classmethod
    def default_starts_at(cls, v: Any) -> datetime:
        """Fall back to the creation time when no start is given."""
        parsed = parse_timestamp(v)
        return parsed if parsed is not None else datetime.now(timezone.utc)

    @field_validator("ends_at", mode="before")
    @classmethod
    def parse_ends_at(cls, v: Any) -> datetime | None:
        return parse_timestamp(v)

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def resolved(self) -> bool:
        """True when an end time is set and is not before the start."""
        return self.ends_at is not None and self.ends_at >= self.starts_at

    @property
    def status(self) -> AlertStatus:
        return AlertStatus.RESOLVED if self.resolved else AlertStatus.FIRING

    def to_postable(self) -> dict[str, Any]:
        """Serialize for the Alertmanager push API; unset endsAt is omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
