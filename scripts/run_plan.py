#!/usr/bin/env python3
"""Replay a YAML plan against Alertmanager and report the notifications it sends back."""
from __future__ import annotations

import asyncio
import sys

from alertsim.config import get_settings
from alertsim.services.plan_runner import PlanRunner
from alertsim.utils.exceptions import AlertSimException
from alertsim.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


async def main() -> int:
    """Run the configured plan end to end."""
    if not settings.plan_file:
        logger.error("plan_file_not_configured")
        return 2

    runner = PlanRunner(settings)
    try:
        result = await runner.run(settings.plan_file)
    except AlertSimException as exc:
        logger.error("plan_run_failed", error=str(exc))
        return 1

    logger.info(
        "plan_run_completed",
        report=str(result.report_path),
        groups=len(result.report.groups),
        notifications=result.report.notification_count,
    )
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
