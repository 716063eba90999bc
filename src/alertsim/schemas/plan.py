from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from alertsim.schemas.alert import AlertStatus, parse_timestamp
from alertsim.utils.durations import parse_duration


class Template(BaseModel):
    """
    Reusable alert skeleton referenced by plan steps.

    Timestamps are mutated as steps fire and resolve the alert.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        """YAML scalars like ``severity: 1`` become strings."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v

    @field_validator("starts_at", "ends_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> datetime | None:
        """Unparseable timestamps are treated as unset."""
        return parse_timestamp(v)


class AlertRef(BaseModel):
    """Reference from a step to a template, with the status to apply."""

    model_config = ConfigDict(extra="forbid")

    ref: str
    status: AlertStatus = AlertStatus.FIRING

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None or v == "":
            return AlertStatus.FIRING
        return v


class Step(BaseModel):
    """One plan step: a batch of alerts sent ``runs`` times every ``repeat``."""

    model_config = ConfigDict(extra="forbid")

    description: str = ""
    runs: int = Field(default=1, gt=0)
    repeat: timedelta = Field(default=timedelta(0))
    alerts: list[AlertRef] = Field(default_factory=list)

    @field_validator("repeat", mode="before")
    @classmethod
    def parse_repeat(cls, v: Any) -> timedelta:
        if v is None:
            return timedelta(0)
        return parse_duration(v)


class Plan(BaseModel):
    """Templates plus the ordered steps that use them."""

    model_config = ConfigDict(extra="forbid")

    templates: dict[str, Template] = Field(default_factory=dict)
    steps: list[Step] = Field(default_factory=list)

    @field_validator("templates", "steps", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any, info) -> Any:
        if v is None:
            return [] if info.field_name == "steps" else {}
        return v
