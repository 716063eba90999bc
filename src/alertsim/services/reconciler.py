"""Group received notifications and render the run report."""
from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import structlog

from alertsim.alerting.base import TargetStatus
from alertsim.schemas.alert import Alert, AlertStatus
from alertsim.schemas.notification import Notification

logger = structlog.get_logger(__name__)

REPORT_TIME_FORMAT = "%Y%m%d-%H%M%S"


def bucket(notifications: Iterable[Notification]) -> dict[str, list[Notification]]:
    """
    Group notifications by exact group key.

    Keys come back in ascending lexicographic order; notifications keep
    their receipt order within a bucket.
    """
    buckets: dict[str, list[Notification]] = {}
    for nf in notifications:
        buckets.setdefault(nf.group_key, []).append(nf)
    return {key: buckets[key] for key in sorted(buckets)}


def derive_alert_status(alert: Alert) -> AlertStatus:
    """An alert in a notification counts as resolved iff it started before it ended."""
    if alert.ends_at is not None and alert.starts_at < alert.ends_at:
        return AlertStatus.RESOLVED
    return AlertStatus.FIRING


@dataclass
class NotificationGroup:
    """All notifications sharing one group key."""
    group_key: str
    notifications: list[Notification]


@dataclass
class Report:
    """Outcome of a plan run, as reconciled from received notifications."""
    plan: str
    generated_at: datetime
    targets: list[TargetStatus] = field(default_factory=list)
    groups: list[NotificationGroup] = field(default_factory=list)

    @property
    def notification_count(self) -> int:
        return sum(len(g.notifications) for g in self.groups)

    def render_text(self) -> str:
        return render_report(self)

    def default_filename(self) -> str:
        """``notifications-<plan stem>-<YYYYmmdd-HHMMSS>``."""
        stem = Path(self.plan).stem if self.plan else "adhoc"
        return f"notifications-{stem}-{self.generated_at.strftime(REPORT_TIME_FORMAT)}"

    def write(self, directory: str | Path = ".") -> Path:
        """Write the rendered report into ``directory`` and return its path."""
        path = Path(directory) / self.default_filename()
        path.write_text(self.render_text(), encoding="utf-8")
        logger.info(
            "report_written",
            path=str(path),
            group_count=len(self.groups),
            notification_count=self.notification_count,
        )
        return path


def build_report(
    plan: str,
    notifications: Sequence[Notification],
    targets: Sequence[TargetStatus] = (),
    generated_at: datetime | None = None,
) -> Report:
    """Bucket notifications and assemble the report."""
    return Report(
        plan=plan,
        generated_at=generated_at or datetime.now(timezone.utc),
        targets=list(targets),
        groups=[
            NotificationGroup(group_key=key, notifications=nfs)
            for key, nfs in bucket(notifications).items()
        ],
    )


def _q(value: object) -> str:
    return json.dumps("" if value is None else str(value), ensure_ascii=False)


def _format_time(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""


def _format_labels(labels: dict[str, str]) -> str:
    return "{" + ", ".join(f"{k}={_q(labels[k])}" for k in sorted(labels)) + "}"


def render_report(report: Report) -> str:
    lines = [f"plan={_q(report.plan)}"]
    for target in report.targets:
        lines.append(
            f"am={_q(target.address)} version={_q(target.version)} config={_q(target.config)}"
        )
        lines.append("")
    lines.append("")

    for group in report.groups:
        lines.append(f"gkey={_q(group.group_key)}")
        for nf in group.notifications:
            lines.append(
                f"\tts={_q(_format_time(nf.timestamp))} status={_q(nf.status)} "
                f"url={_q(nf.external_url)} nb_alerts={len(nf.alerts)}"
            )
            for alert in nf.alerts:
                lines.append(
                    f"\t\tstatus={_q(derive_alert_status(alert).value)} "
                    f"start={_q(_format_time(alert.starts_at))} "
                    f"end={_q(_format_time(alert.ends_at))} "
                    f"labels={_q(_format_labels(alert.labels))}"
                )
            lines.append("")
        lines.append("")

    return "\n".join(lines) + "\n"
