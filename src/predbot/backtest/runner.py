"""High-level entry points for running backtests.

Provides build_repository() for wiring the cache/fetch pipeline and
run_backtest() for a single end-to-end run. The ledger client is created
from settings unless one is injected; an injected client is left open.
"""

import time
import uuid
from collections.abc import Callable

from predbot.backtest.engine import SimulationEngine
from predbot.backtest.models import Report, SimulationSettings
from predbot.config import AppSettings
from predbot.data.fetcher import RoundFetcher
from predbot.data.repository import RoundRepository
from predbot.data.store import RoundCacheStore
from predbot.ledger.client import LedgerClient
from predbot.logging import bind_run_context, get_logger

logger = get_logger(__name__)


def build_repository(ledger: LedgerClient, app_settings: AppSettings) -> RoundRepository:
    """Wire cache store, fetcher and repository around ``ledger``."""
    return RoundRepository(
        ledger=ledger,
        store=RoundCacheStore(app_settings.historical.cache_path),
        fetcher=RoundFetcher(ledger, app_settings.historical, app_settings.ledger),
        settings=app_settings.historical,
    )


async def run_backtest(
    settings: SimulationSettings,
    app_settings: AppSettings | None = None,
    ledger: LedgerClient | None = None,
    progress_callback: Callable | None = None,
) -> Report:
    """Refresh the round cache and simulate one strategy over it.

    Args:
        settings: Strategy, stake and capital for this run.
        app_settings: Cache, ledger and fee configuration. Defaults to env.
        ledger: Ledger client to use. Defaults to a Web3LedgerClient that is
            closed when the run ends.
        progress_callback: Awaited with (done_batches, total_batches) while
            missing rounds are fetched.

    Returns:
        Report for the run (carries configuration_error if settings were rejected).
    """
    if app_settings is None:
        app_settings = AppSettings()

    owns_ledger = ledger is None
    if ledger is None:
        from predbot.ledger.web3_client import Web3LedgerClient

        ledger = Web3LedgerClient(app_settings.ledger)

    bind_run_context(run_id=uuid.uuid4().hex[:8], strategy=settings.strategy.value)
    start_time = time.monotonic()

    try:
        engine = SimulationEngine(
            repository=build_repository(ledger, app_settings),
            fee_settings=app_settings.fees,
        )
        report = await engine.run(settings, progress_callback)
    finally:
        if owns_ledger:
            await ledger.close()

    logger.info(
        "run_backtest_complete",
        rounds_played=report.rounds_played,
        realized_pnl=str(report.realized_pnl),
        configuration_error=report.configuration_error,
        elapsed_seconds=round(time.monotonic() - start_time, 2),
    )
    return report
