from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from alertsim.schemas.alert import Alert


class Notification(BaseModel):
    """
    Alertmanager webhook notification, as stored by the receiver.

    ``timestamp`` is the receipt time set by the receiver; any value sent
    by the client is discarded.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: datetime | None = None
    version: str = ""
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    receiver: str = ""
    status: str = ""
    alerts: list[Alert] = Field(default_factory=list)
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(
        default_factory=dict, alias="commonAnnotations"
    )
    external_url: str = Field(default="", alias="externalURL")

    @field_validator(
        "alerts", "group_labels", "common_labels", "common_annotations", mode="before"
    )
    @classmethod
    def none_as_empty(cls, v: Any, info) -> Any:
        if v is None:
            return [] if info.field_name == "alerts" else {}
        return v

    @field_validator("timestamp", mode="before")
    @classmethod
    def drop_client_timestamp(cls, v: Any) -> None:
        """Receipt time is assigned by the receiver, never by the sender."""
        return None

    def received(self, at: datetime) -> Notification:
        """Return a copy stamped with its receipt time."""
        return self.model_copy(update={"timestamp": at})
