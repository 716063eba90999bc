#!/usr/bin/env python3
"""Send synthetic alerts to Alertmanager on a fixed schedule."""
from __future__ import annotations

import asyncio
import sys

from alertsim.alerting.alertmanager import AlertmanagerTarget
from alertsim.config import get_settings
from alertsim.services.alert_builder import AlertBuilder
from alertsim.services.synthetic import build_alert_slice, parse_label_spec, parse_time_bounds
from alertsim.utils.durations import parse_duration
from alertsim.utils.exceptions import AlertSimException
from alertsim.utils.logging import get_logger, setup_logging
from alertsim.workers.sender import BatchedSender

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


async def main() -> int:
    """Build the alert slice from settings and send it."""
    targets = settings.alertmanager_targets
    if not targets:
        logger.error("alertmanager_addresses_not_configured")
        return 2

    try:
        repeat = parse_duration(settings.sender_repeat_interval)
    except ValueError as exc:
        logger.error("invalid_repeat_interval", error=str(exc))
        return 2

    start, end = parse_time_bounds(settings.sender_start, settings.sender_end)
    alerts = build_alert_slice(
        settings.sender_num,
        parse_label_spec(settings.sender_labels),
        parse_label_spec(settings.sender_annotations),
        start,
        end,
        builder=AlertBuilder(settings.generator_url),
    )

    sender = BatchedSender(
        runs=settings.sender_runs,
        batch_size=settings.sender_batch,
        interval=repeat,
        push_timeout=settings.push_timeout_seconds,
        target_factory=lambda address: AlertmanagerTarget(
            address,
            api_version=settings.alertmanager_api_version,
            timeout=settings.push_timeout_seconds,
        ),
    )
    try:
        report = await sender.send(targets, alerts)
    except AlertSimException as exc:
        logger.error("send_failed", error=str(exc))
        return 1

    logger.info(
        "send_completed",
        successes=report.successes,
        failures=report.failures,
        timeouts=report.timeouts,
    )
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
