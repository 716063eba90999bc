from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from alertsim.alerting.alertmanager import AlertmanagerTarget
from alertsim.alerting.base import AlertTarget, TargetStatus, ensure_valid
from alertsim.config import Settings
from alertsim.services.alert_builder import AlertBuilder
from alertsim.services.plan_interpreter import PlanInterpreter, TemplateStore, load_plan
from alertsim.services.reconciler import Report, build_report
from alertsim.utils.durations import format_duration
from alertsim.utils.exceptions import TargetConfigError
from alertsim.workers.receiver import WebhookReceiver
from alertsim.workers.sender import BatchedSender, SendReport

logger = structlog.get_logger(__name__)


@dataclass
class PlanRunResult:
    report: Report
    step_reports: list[SendReport] = field(default_factory=list)
    report_path: Path | None = None


class PlanRunner:
    """Replays a plan against Alertmanager while collecting its notifications."""

    def __init__(
        self,
        settings: Settings,
        target_factory: Callable[[str], AlertTarget] | None = None,
        receiver: WebhookReceiver | None = None,
        interpreter: PlanInterpreter | None = None,
    ):
        self.settings = settings
        self.target_factory = target_factory or self._default_target
        self.receiver = receiver or WebhookReceiver(
            shutdown_timeout=settings.shutdown_timeout_seconds
        )
        self.interpreter = interpreter or PlanInterpreter(
            AlertBuilder(settings.generator_url)
        )

    def _default_target(self, address: str) -> AlertTarget:
        return AlertmanagerTarget(
            address,
            api_version=self.settings.alertmanager_api_version,
            timeout=self.settings.push_timeout_seconds,
        )

    def build_targets(self) -> list[AlertTarget]:
        """
        Raises:
            TargetConfigError: If no address is configured, one is malformed or
                a target rejects its configuration
        """
        addresses = self.settings.alertmanager_targets
        if not addresses:
            raise TargetConfigError("", "no Alertmanager addresses configured")
        return [ensure_valid(self.target_factory(address)) for address in addresses]

    async def query_targets(self, targets: list[AlertTarget]) -> list[TargetStatus]:
        """Fetch version and configuration of every target, failing on the first error."""
        statuses = []
        for target in targets:
            target_status = await target.status()
            logger.info(
                "alertmanager_found",
                address=target_status.address,
                version=target_status.version,
            )
            statuses.append(target_status)
        return statuses

    async def run(self, plan_path: str | Path, write_report: bool = True) -> PlanRunResult:
        """
        Execute every step of the plan, then reconcile received notifications.

        Raises:
            PlanError: If the plan can't be loaded
            TargetConfigError: If a target address is malformed
            TargetQueryError: If a target can't be queried
            ReceiverBindError: If the webhook receiver can't listen
        """
        plan = load_plan(plan_path)
        targets = self.build_targets()
        statuses = await self.query_targets(targets)

        await self.receiver.start(self.settings.listen_address)
        step_reports: list[SendReport] = []
        try:
            store = TemplateStore.from_plan(plan)
            for step in plan.steps:
                alerts = self.interpreter.build_step_alerts(step, store)
                logger.info(
                    "running_step",
                    description=step.description,
                    alert_count=len(alerts),
                    runs=step.runs,
                    repeat=format_duration(step.repeat),
                )
                sender = BatchedSender(
                    runs=step.runs,
                    batch_size=max(len(alerts), 1),
                    interval=step.repeat,
                    push_timeout=self.settings.push_timeout_seconds,
                )
                step_reports.append(await sender.send(targets, alerts))

            logger.info("waiting_for_notifications", seconds=self.settings.settle_seconds)
            await asyncio.sleep(self.settings.settle_seconds)
        finally:
            await self.receiver.stop()

        report = build_report(str(plan_path), self.receiver.notifications(), statuses)
        result = PlanRunResult(report=report, step_reports=step_reports)
        if write_report:
            result.report_path = report.write(self.settings.report_dir)
        return result
