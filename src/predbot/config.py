"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from predbot.models import Strategy, WeightSide


class LedgerSettings(BaseSettings):
    """Prediction contract connection settings."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    provider_url: str = "https://bsc-dataseed.binance.org/"
    contract_address: str = "0x18b2a687610328590bc8f2e5fedde3b582a49cda"
    fetch_timeout_seconds: float = 30.0


class HistoricalDataSettings(BaseSettings):
    """Round cache and refresh configuration.

    Controls where the round cache lives, which epochs are considered, and how
    missing rounds are fanned out to the ledger.
    All fields configurable via HISTORICAL_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="HISTORICAL_")

    cache_path: str = "data/rounds.json"
    min_epoch: int = Field(default=100, ge=0)  # rounds below this are never fetched
    stale_epoch_threshold: int = 10  # skip refresh when fewer new epochs than this
    batch_size: int = Field(default=100, ge=1)
    batches_per_group: int = Field(default=10, ge=1)
    max_concurrent_fetches: int | None = Field(default=None, ge=1)  # None = batch shape only


class FeeSettings(BaseSettings):
    """Fee deducted by the prediction contract from winnings."""

    model_config = SettingsConfigDict(env_prefix="FEES_")

    winnings_fee: Decimal = Decimal("0.03")  # 3%


class BacktestSettings(BaseSettings):
    """Default simulation parameters.

    Defaults: 1 BNB capital, 0.001 BNB per position.
    All fields configurable via BACKTEST_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="BACKTEST_")

    strategy: Strategy = Strategy.BIGGER_VOLUME
    amount_per_trade: Decimal = Decimal("0.001")
    capital_amount: Decimal = Decimal("1")
    weight_side: WeightSide = WeightSide.LOWER_PAYOUT
    weight_multiplier: int = 1

    def to_simulation_settings(self) -> "SimulationSettings":
        """Construct SimulationSettings for a single run from these defaults."""
        from predbot.backtest.models import SimulationSettings

        return SimulationSettings(
            strategy=self.strategy,
            amount_per_trade=self.amount_per_trade,
            capital_amount=self.capital_amount,
            weight_side=self.weight_side,
            weight_multiplier=self.weight_multiplier,
        )


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    ledger: LedgerSettings = LedgerSettings()
    historical: HistoricalDataSettings = HistoricalDataSettings()
    fees: FeeSettings = FeeSettings()
    backtest: BacktestSettings = BacktestSettings()
