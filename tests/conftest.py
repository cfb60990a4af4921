"""Shared test fixtures for the prediction backtester."""

from pathlib import Path

import pytest

from predbot.config import (
    AppSettings,
    BacktestSettings,
    FeeSettings,
    HistoricalDataSettings,
    LedgerSettings,
)
from tests.factories import FakeLedger


@pytest.fixture
def fake_ledger() -> FakeLedger:
    """Ledger with rounds 0..249 closed and 250 open."""
    return FakeLedger(current_epoch=250)


@pytest.fixture
def historical_settings(tmp_path: Path) -> HistoricalDataSettings:
    """Default refresh policy with the cache inside tmp_path."""
    return HistoricalDataSettings(cache_path=str(tmp_path / "rounds.json"))


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    """Short fetch timeout so hung fakes fail fast."""
    return LedgerSettings(fetch_timeout_seconds=1.0)


@pytest.fixture
def app_settings(
    historical_settings: HistoricalDataSettings,
    ledger_settings: LedgerSettings,
) -> AppSettings:
    """AppSettings with test defaults (tmp cache, default fees)."""
    return AppSettings(
        log_level="DEBUG",
        ledger=ledger_settings,
        historical=historical_settings,
        fees=FeeSettings(),
        backtest=BacktestSettings(),
    )
