from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from alertsim.schemas.alert import Alert

DEFAULT_GENERATOR_URL = "http://example.com/"


class AlertBuilder:
    """Generates full-fledged alerts sharing one generator URL."""

    def __init__(self, generator_url: str = DEFAULT_GENERATOR_URL):
        self.generator_url = generator_url

    def create_alert(
        self,
        labels: Mapping[str, str],
        annotations: Mapping[str, str],
        start: datetime | None,
        end: datetime | None,
    ) -> Alert:
        """
        Build a single alert.

        Label and annotation maps are copied so later changes to the
        source mappings never leak into the alert.
        """
        return Alert(
            labels={k: v for k, v in labels.items()},
            annotations={k: v for k, v in annotations.items()},
            starts_at=start,
            ends_at=end,
            generator_url=self.generator_url,
        )
