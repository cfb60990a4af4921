"""Simulation engine: replays the round history against one strategy.

Validates the settings, pulls the ordered round sequence from the repository,
then folds the strategy evaluator over it one round at a time. The loop is
strictly sequential: every round depends on the wallet state left by the one
before it.

Stopping conditions:
- the round sequence is exhausted
- the evaluator reports the wallets can no longer cover the stake

CRITICAL: All monetary values use Decimal. No rounding happens here.
"""

from collections.abc import Callable, Sequence
from decimal import Decimal

from predbot.analytics.metrics import max_drawdown, win_rate
from predbot.backtest.models import (
    EquityPoint,
    Report,
    SimulationSettings,
    WalletReport,
    WalletState,
)
from predbot.backtest.strategies import DUAL_WALLET_SIDES, evaluate, initial_wallets
from predbot.config import FeeSettings
from predbot.data.models import RoundRecord
from predbot.data.repository import RoundRepository
from predbot.exceptions import ConfigurationError
from predbot.logging import get_logger
from predbot.models import Strategy

logger = get_logger(__name__)


class SimulationEngine:
    """Runs a strategy over the cached round history.

    Args:
        repository: Source of the epoch-ordered round sequence.
        fee_settings: Fee withheld from winnings.
    """

    def __init__(
        self,
        repository: RoundRepository,
        fee_settings: FeeSettings,
    ) -> None:
        self._repository = repository
        self._fee = fee_settings.winnings_fee

    async def run(
        self,
        settings: SimulationSettings,
        progress_callback: Callable | None = None,
    ) -> Report:
        """Validate settings, load rounds, and simulate.

        A configuration error is returned inside the Report; the repository
        is not touched in that case.
        """
        try:
            settings.validate()
        except ConfigurationError as e:
            logger.warning(
                "simulation_configuration_error",
                strategy=settings.strategy.value,
                amount_per_trade=str(settings.amount_per_trade),
                capital_amount=str(settings.capital_amount),
                error=str(e),
            )
            return self.configuration_error_report(settings, str(e))

        rounds = await self._repository.load(progress_callback)
        return self.simulate(rounds, settings)

    def simulate(
        self,
        rounds: Sequence[RoundRecord],
        settings: SimulationSettings,
    ) -> Report:
        """Replay ``rounds`` in ascending epoch order and build the Report."""
        try:
            settings.validate()
        except ConfigurationError as e:
            return self.configuration_error_report(settings, str(e))

        ordered = sorted(rounds, key=lambda r: r.epoch)
        wallets = initial_wallets(settings)
        starting_wallets = wallets
        equity_curve: list[EquityPoint] = []
        stopped_early = False

        logger.info(
            "simulation_starting",
            strategy=settings.strategy.value,
            rounds=len(ordered),
            capital_amount=str(settings.capital_amount),
            amount_per_trade=str(settings.amount_per_trade),
        )

        for round_ in ordered:
            evaluation = evaluate(wallets, round_, settings, self._fee)
            wallets = evaluation.wallets

            if evaluation.terminated:
                stopped_early = True
                logger.info(
                    "simulation_capital_exhausted",
                    epoch=round_.epoch,
                    rounds_played=len(equity_curve),
                    capital=[str(w.capital) for w in wallets],
                )
                break

            equity_curve.append(
                EquityPoint(epoch=round_.epoch, capital=_total_capital(wallets))
            )

        report = self._build_report(
            settings=settings,
            starting_wallets=starting_wallets,
            wallets=wallets,
            rounds_available=len(ordered),
            equity_curve=equity_curve,
            stopped_early=stopped_early,
        )

        logger.info(
            "simulation_complete",
            strategy=settings.strategy.value,
            rounds_played=report.rounds_played,
            wins=report.wins,
            losses=report.losses,
            realized_pnl=str(report.realized_pnl),
            stopped_early=stopped_early,
        )
        return report

    def _build_report(
        self,
        settings: SimulationSettings,
        starting_wallets: tuple[WalletState, ...],
        wallets: tuple[WalletState, ...],
        rounds_available: int,
        equity_curve: list[EquityPoint],
        stopped_early: bool,
    ) -> Report:
        starting_capital = settings.capital_amount
        ending_capital = _total_capital(wallets)
        realized_pnl = ending_capital - starting_capital
        wins = sum(w.wins for w in wallets)
        losses = sum(w.losses for w in wallets)

        dual = settings.strategy is Strategy.DUAL_WALLET
        wallet_reports = [
            WalletReport(
                starting_capital=start.capital,
                ending_capital=end.capital,
                wins=end.wins,
                losses=end.losses,
                side=DUAL_WALLET_SIDES[i] if dual else None,
            )
            for i, (start, end) in enumerate(zip(starting_wallets, wallets))
        ]

        return Report(
            strategy=settings.strategy,
            starting_capital=starting_capital,
            rounds_available=rounds_available,
            rounds_played=len(equity_curve),
            wins=wins,
            losses=losses,
            ending_capital=ending_capital,
            realized_pnl=realized_pnl,
            pnl_percent=realized_pnl / starting_capital * 100,
            # dual-wallet rounds always split one win and one loss
            win_rate=None if dual else win_rate(wins, losses),
            max_drawdown=max_drawdown(
                starting_capital, (p.capital for p in equity_curve)
            ),
            stopped_early=stopped_early,
            wallets=wallet_reports,
            equity_curve=equity_curve,
        )

    @staticmethod
    def configuration_error_report(settings: SimulationSettings, error: str) -> Report:
        """Report for a run rejected before any round was processed."""
        return Report(
            strategy=settings.strategy,
            starting_capital=settings.capital_amount,
            rounds_available=0,
            rounds_played=0,
            wins=0,
            losses=0,
            ending_capital=settings.capital_amount,
            realized_pnl=Decimal("0"),
            pnl_percent=Decimal("0"),
            configuration_error=error,
        )


def _total_capital(wallets: Sequence[WalletState]) -> Decimal:
    return sum((w.capital for w in wallets), Decimal("0"))
