"""Data models for the simulation engine.

Defines run settings, wallet state, per-round bet outcomes, and the final
report. Wallet state and outcomes are frozen: the strategy evaluator returns
new instances instead of mutating its inputs.

CRITICAL: All monetary values use Decimal. Never use float for stakes, capital, or payouts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from predbot.exceptions import ConfigurationError
from predbot.models import Side, Strategy, WeightSide


@dataclass(frozen=True)
class SimulationSettings:
    """Parameters for a single simulation run.

    ``weight_side`` and ``weight_multiplier`` only apply to DUAL_WALLET.
    """

    strategy: Strategy
    amount_per_trade: Decimal
    capital_amount: Decimal
    weight_side: WeightSide = WeightSide.LOWER_PAYOUT
    weight_multiplier: int = 1

    def validate(self) -> None:
        """Raise ConfigurationError if the stake cannot be afforded.

        A single wallet needs the stake strictly below the capital; two
        wallets split the capital, so twice the stake must be below it.
        """
        if self.amount_per_trade <= 0:
            raise ConfigurationError("amount per trade must be positive")
        if self.capital_amount <= 0:
            raise ConfigurationError("capital amount must be positive")

        if self.strategy is Strategy.DUAL_WALLET:
            if self.weight_multiplier < 1:
                raise ConfigurationError("weight multiplier must be a positive integer")
            if self.amount_per_trade * 2 >= self.capital_amount:
                raise ConfigurationError(
                    "twice the amount per trade must be below the capital amount "
                    "for the dual wallet strategy"
                )
        elif self.amount_per_trade >= self.capital_amount:
            raise ConfigurationError(
                "amount per trade must be below the capital amount"
            )

    def with_overrides(self, **kwargs: object) -> SimulationSettings:
        """Return a new SimulationSettings with specified fields overridden."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "amount_per_trade": str(self.amount_per_trade),
            "capital_amount": str(self.capital_amount),
            "weight_side": self.weight_side.value,
            "weight_multiplier": self.weight_multiplier,
        }


@dataclass(frozen=True)
class WalletState:
    """Capital and outcome counters of one simulated wallet."""

    capital: Decimal
    wins: int = 0
    losses: int = 0


@dataclass(frozen=True)
class WalletBet:
    """One wallet's stake in one round.

    Attributes:
        side: Side the wallet backed.
        stake: Amount debited before the round resolved.
        payout: Multiplier applied to the stake on a win.
        won: Whether ``side`` matched the round winner.
        credit: Amount credited back (stake * payout * (1 - fee)), zero on a loss.
    """

    side: Side
    stake: Decimal
    payout: Decimal
    won: bool
    credit: Decimal


@dataclass(frozen=True)
class BetOutcome:
    """What was wagered in a played round, one leg per wallet."""

    epoch: int
    winner: Side
    legs: tuple[WalletBet, ...]

    @property
    def won(self) -> bool:
        """True if any wallet's leg won (always true for dual-wallet rounds)."""
        return any(leg.won for leg in self.legs)


@dataclass(frozen=True)
class RoundEvaluation:
    """Result of evaluating one round against the current wallets.

    When ``terminated`` is True the round was not played: ``outcome`` is
    None and ``wallets`` holds the final (possibly clamped) state.
    """

    wallets: tuple[WalletState, ...]
    outcome: BetOutcome | None
    terminated: bool = False


@dataclass
class EquityPoint:
    """Total capital across wallets after a played round."""

    epoch: int
    capital: Decimal


@dataclass
class WalletReport:
    """Per-wallet summary. ``side`` is set for dual-wallet runs only."""

    starting_capital: Decimal
    ending_capital: Decimal
    wins: int
    losses: int
    side: Side | None = None

    def to_dict(self) -> dict:
        return {
            "side": self.side.value if self.side is not None else None,
            "starting_capital": str(self.starting_capital),
            "ending_capital": str(self.ending_capital),
            "wins": self.wins,
            "losses": self.losses,
        }


@dataclass
class Report:
    """Aggregate result of a simulation run.

    Plain data for a presentation layer to render. ``configuration_error`` is
    set (and every counter is zero) when the settings were rejected.
    """

    strategy: Strategy
    starting_capital: Decimal
    rounds_available: int
    rounds_played: int
    wins: int
    losses: int
    ending_capital: Decimal
    realized_pnl: Decimal
    pnl_percent: Decimal
    win_rate: Decimal | None = None
    max_drawdown: Decimal | None = None
    stopped_early: bool = False
    configuration_error: str | None = None
    wallets: list[WalletReport] = field(default_factory=list)
    equity_curve: list[EquityPoint] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.configuration_error is None

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output, Decimals as strings.

        The equity curve is omitted; it is usually thousands of points.
        """
        return {
            "strategy": self.strategy.value,
            "starting_capital": str(self.starting_capital),
            "rounds_available": self.rounds_available,
            "rounds_played": self.rounds_played,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": str(self.win_rate) if self.win_rate is not None else None,
            "ending_capital": str(self.ending_capital),
            "realized_pnl": str(self.realized_pnl),
            "pnl_percent": str(self.pnl_percent),
            "max_drawdown": (
                str(self.max_drawdown) if self.max_drawdown is not None else None
            ),
            "stopped_early": self.stopped_early,
            "configuration_error": self.configuration_error,
            "wallets": [w.to_dict() for w in self.wallets],
        }
