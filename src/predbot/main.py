"""Non-interactive entry point for the prediction backtester.

Reads every setting from the environment (and .env), refreshes the round
cache, runs one simulation, and logs the report as structured data.
Use LOG_FORMAT=json to get a machine-readable report line.
"""

import asyncio
import sys

from predbot.backtest.runner import run_backtest
from predbot.config import AppSettings
from predbot.logging import get_logger, setup_logging


async def _refresh_progress(done: int, total: int) -> None:
    get_logger("predbot.main").info("round_fetch_progress", progress=f"{done}/{total}")


async def run(settings: AppSettings) -> int:
    """Run one backtest from settings; returns a process exit code."""
    logger = get_logger("predbot.main")
    report = await run_backtest(
        settings.backtest.to_simulation_settings(),
        app_settings=settings,
        progress_callback=_refresh_progress,
    )

    if not report.ok:
        logger.error("backtest_rejected", error=report.configuration_error)
        return 2

    logger.info("backtest_report", **report.to_dict())
    return 0


def main() -> None:
    settings = AppSettings()
    setup_logging(settings.log_level)
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    main()
