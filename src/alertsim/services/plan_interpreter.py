from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from alertsim.schemas.alert import Alert, AlertStatus
from alertsim.schemas.plan import Plan, Step, Template
from alertsim.services.alert_builder import AlertBuilder
from alertsim.utils.exceptions import PlanError

logger = structlog.get_logger(__name__)

# End-time offset for firing alerts when the step has no repeat interval.
DEFAULT_FIRING_OFFSET = timedelta(minutes=3)
FIRING_OFFSET_FACTOR = 3


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def load_plan(path: str | Path) -> Plan:
    """
    Read and validate a YAML plan file.

    Raises:
        PlanError: If the file can't be read or doesn't describe a valid plan
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise PlanError(f"fail to read plan: {exc}", path=str(path)) from exc
    except yaml.YAMLError as exc:
        raise PlanError(f"fail to parse plan: {exc}", path=str(path)) from exc

    return parse_plan(data, source=str(path))


def parse_plan(data: object, source: str | None = None) -> Plan:
    """Validate already-decoded plan data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PlanError("top-level value must be a mapping", path=source)
    try:
        plan = Plan.model_validate(data)
    except ValidationError as exc:
        raise PlanError(f"fail to parse plan: {exc}", path=source) from exc

    logger.info(
        "plan_loaded",
        source=source,
        template_count=len(plan.templates),
        step_count=len(plan.steps),
    )
    return plan


class TemplateStore:
    """
    Mutable template state for a single plan run.

    Steps advance template timestamps in place, so a later step
    referencing the same template sees earlier transitions.
    """

    def __init__(self, templates: dict[str, Template] | None = None):
        self._templates: dict[str, Template] = dict(templates or {})

    @classmethod
    def from_plan(cls, plan: Plan) -> TemplateStore:
        """Copy a plan's templates so the plan itself stays untouched."""
        return cls(
            {name: t.model_copy(deep=True) for name, t in plan.templates.items()}
        )

    def get(self, name: str) -> Template | None:
        return self._templates.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)


class PlanInterpreter:
    """Turns plan steps into concrete alert batches."""

    def __init__(
        self,
        builder: AlertBuilder,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.builder = builder
        self.clock = clock

    @staticmethod
    def firing_offset(step: Step) -> timedelta:
        """How long a firing alert stays valid without being re-sent."""
        offset = step.repeat * FIRING_OFFSET_FACTOR
        if offset == timedelta(0):
            offset = DEFAULT_FIRING_OFFSET
        return offset

    def apply_status(self, template: Template, status: AlertStatus, step: Step) -> None:
        """
        Advance a template's timestamps for one status transition.

        Firing: start defaults to now and restarts at now when the template
        already carries an end time; the end is pushed ``firing_offset``
        past the start. Resolved: the end defaults to now.
        """
        now = self.clock()
        if template.starts_at is None:
            template.starts_at = now

        if status == AlertStatus.FIRING:
            if template.ends_at is not None:
                template.starts_at = now
            template.ends_at = template.starts_at + self.firing_offset(step)
        elif status == AlertStatus.RESOLVED:
            if template.ends_at is None:
                template.ends_at = now

    def build_step_alerts(self, step: Step, store: TemplateStore) -> list[Alert]:
        """
        Produce one alert per resolvable reference in the step.

        Missing template references are logged and skipped.
        """
        alerts: list[Alert] = []
        for alert_ref in step.alerts:
            template = store.get(alert_ref.ref)
            if template is None:
                logger.warning(
                    "template_not_found",
                    ref=alert_ref.ref,
                    step=step.description,
                )
                continue

            self.apply_status(template, alert_ref.status, step)
            alerts.append(
                self.builder.create_alert(
                    template.labels,
                    template.annotations,
                    template.starts_at,
                    template.ends_at,
                )
            )
        return alerts
