"""Shared enums for the prediction backtester."""

from enum import Enum


class Side(str, Enum):
    """Direction a round resolves to, or a bet backs."""

    UP = "up"
    DOWN = "down"

    @property
    def opposite(self) -> "Side":
        return Side.DOWN if self is Side.UP else Side.UP


class Strategy(str, Enum):
    """Wagering strategy replayed by the simulation engine."""

    BIGGER_VOLUME = "bigger_volume"
    SMALLER_VOLUME = "smaller_volume"
    ALWAYS_DOWN = "always_down"
    ALWAYS_UP = "always_up"
    DUAL_WALLET = "dual_wallet"

    @property
    def wallet_count(self) -> int:
        return 2 if self is Strategy.DUAL_WALLET else 1


class WeightSide(str, Enum):
    """Which side receives the weighted stake in dual-wallet mode."""

    LOWER_PAYOUT = "lower_payout"
    HIGHER_PAYOUT = "higher_payout"
