from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

import httpx
import structlog

from alertsim.alerting.alertmanager import AlertmanagerTarget
from alertsim.alerting.base import AlertTarget, ensure_valid
from alertsim.schemas.alert import Alert

logger = structlog.get_logger(__name__)

# Per-push timeout when the round interval is zero.
DEFAULT_PUSH_TIMEOUT_SECONDS = 10.0


class PushStatus(str, Enum):
    """Result of one push of one batch to one target."""

    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


@dataclass
class PushOutcome:
    run: int
    batch_index: int
    batch_size: int
    target: str
    status: PushStatus
    error: str | None = None


@dataclass
class RoundReport:
    run: int
    batch_count: int = 0
    outcomes: list[PushOutcome] = field(default_factory=list)


@dataclass
class SendReport:
    """Per-target outcomes of every round, in send order."""
    rounds: list[RoundReport] = field(default_factory=list)

    @property
    def outcomes(self) -> list[PushOutcome]:
        return [o for r in self.rounds for o in r.outcomes]

    def _count(self, status: PushStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def successes(self) -> int:
        return self._count(PushStatus.SUCCESS)

    @property
    def failures(self) -> int:
        return self._count(PushStatus.FAILURE)

    @property
    def timeouts(self) -> int:
        return self._count(PushStatus.TIMEOUT)

    @property
    def ok(self) -> bool:
        return all(o.status == PushStatus.SUCCESS for o in self.outcomes)


def partition(alerts: Sequence[Alert], batch_size: int) -> list[Sequence[Alert]]:
    """Split alerts into consecutive batches of at most ``batch_size``."""
    return [alerts[i : i + batch_size] for i in range(0, len(alerts), batch_size)]


class BatchedSender:
    """Sends alert batches to every target, ``runs`` times, one round per interval."""

    def __init__(
        self,
        runs: int,
        batch_size: int,
        interval: timedelta | float,
        push_timeout: float = DEFAULT_PUSH_TIMEOUT_SECONDS,
        target_factory: Callable[[str], AlertTarget] = AlertmanagerTarget,
    ):
        if runs <= 0:
            raise ValueError(f"runs must be greater than 0, got {runs}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be greater than 0, got {batch_size}")
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")

        self.runs = runs
        self.batch_size = batch_size
        self.interval = float(interval)
        self.push_timeout = push_timeout
        self.target_factory = target_factory

    @property
    def round_timeout(self) -> float:
        """Bound for a single push; the round interval unless that is zero."""
        return self.interval if self.interval > 0 else self.push_timeout

    def build_targets(self, targets: Sequence[str | AlertTarget]) -> list[AlertTarget]:
        """
        Resolve addresses into targets.

        Raises:
            TargetConfigError: If an address is malformed or a target
                rejects its own configuration
        """
        return [
            ensure_valid(t if isinstance(t, AlertTarget) else self.target_factory(t))
            for t in targets
        ]

    async def send(
        self,
        targets: Sequence[str | AlertTarget],
        alerts: Sequence[Alert],
    ) -> SendReport:
        """
        Send ``alerts`` to all ``targets`` for every run.

        The first round starts immediately; each round then waits until
        ``interval`` has elapsed since it started. Push failures and
        timeouts are recorded, never raised. Targets are kept open for the
        whole call so connections are reused between rounds.

        Raises:
            TargetConfigError: If a target address is malformed
        """
        resolved = self.build_targets(targets)
        batches = partition(list(alerts), self.batch_size)
        loop = asyncio.get_running_loop()
        report = SendReport()

        for target in resolved:
            await target.open()
        try:
            for run in range(1, self.runs + 1):
                deadline = loop.time() + self.interval

                logger.info(
                    "sending_alerts",
                    run=run,
                    runs=self.runs,
                    alert_count=len(alerts),
                    batch_count=len(batches),
                    target_count=len(resolved),
                )
                round_report = RoundReport(run=run, batch_count=len(batches))
                for index, batch in enumerate(batches):
                    for target in resolved:
                        outcome = await self._push(target, batch, run, index)
                        round_report.outcomes.append(outcome)
                report.rounds.append(round_report)

                remaining = deadline - loop.time()
                if remaining > 0:
                    await asyncio.sleep(remaining)
        finally:
            for target in resolved:
                await target.aclose()

        logger.info(
            "alerts_sent",
            runs=self.runs,
            successes=report.successes,
            failures=report.failures,
            timeouts=report.timeouts,
        )
        return report

    async def _push(
        self,
        target: AlertTarget,
        batch: Sequence[Alert],
        run: int,
        batch_index: int,
    ) -> PushOutcome:
        """Push one batch to one target within the round timeout."""
        outcome = PushOutcome(
            run=run,
            batch_index=batch_index,
            batch_size=len(batch),
            target=target.address,
            status=PushStatus.SUCCESS,
        )
        try:
            async with asyncio.timeout(self.round_timeout):
                await target.push(batch)
        except (TimeoutError, httpx.TimeoutException):
            outcome.status = PushStatus.TIMEOUT
            outcome.error = f"timed out after {self.round_timeout:g}s"
            logger.warning(
                "push_timeout",
                target=target.address,
                run=run,
                batch=batch_index,
                timeout=self.round_timeout,
            )
        except httpx.HTTPError as exc:
            outcome.status = PushStatus.FAILURE
            outcome.error = str(exc) or type(exc).__name__
            logger.error(
                "error_sending_alerts",
                target=target.address,
                run=run,
                batch=batch_index,
                error=outcome.error,
            )
        except Exception as exc:
            outcome.status = PushStatus.FAILURE
            outcome.error = str(exc) or type(exc).__name__
            logger.error(
                "error_sending_alerts",
                target=target.address,
                run=run,
                batch=batch_index,
                error=outcome.error,
                exc_info=True,
            )
        return outcome
