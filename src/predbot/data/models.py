"""Data model for a resolved prediction round.

CRITICAL: All prices, pool amounts, and payouts use Decimal. Never use float.
Decimals are persisted as strings so the JSON cache reloads them exactly.
"""

from dataclasses import dataclass
from decimal import Decimal

from predbot.models import Side


def _finite_decimal(data: dict, key: str) -> Decimal:
    value = Decimal(data[key])
    if not value.is_finite():
        raise ValueError(f"{key} is not a finite number: {data[key]!r}")
    return value


@dataclass(frozen=True)
class RoundRecord:
    """A single resolved round as cached locally.

    Built once by the payout calculator from raw ledger data and never
    mutated afterwards. ``winner`` and both payouts are derived values.
    """

    epoch: int
    start_timestamp: int
    lock_timestamp: int
    close_timestamp: int
    lock_price: Decimal
    close_price: Decimal
    total_amount: Decimal
    bull_amount: Decimal
    bear_amount: Decimal
    reward_base_cal_amount: Decimal
    reward_amount: Decimal
    winner: Side
    bull_payout: Decimal
    bear_payout: Decimal

    def payout_for(self, side: Side) -> Decimal:
        """Return the payout multiplier credited to a winning stake on ``side``."""
        return self.bull_payout if side is Side.UP else self.bear_payout

    def to_dict(self) -> dict:
        """Serialize to the cache's JSON shape (camelCase keys, Decimals as str)."""
        return {
            "epoch": self.epoch,
            "startTimestamp": self.start_timestamp,
            "lockTimestamp": self.lock_timestamp,
            "closeTimestamp": self.close_timestamp,
            "lockPrice": str(self.lock_price),
            "closePrice": str(self.close_price),
            "totalAmount": str(self.total_amount),
            "bullAmount": str(self.bull_amount),
            "bearAmount": str(self.bear_amount),
            "rewardBaseCalAmount": str(self.reward_base_cal_amount),
            "rewardAmount": str(self.reward_amount),
            "winner": self.winner.value,
            "bullPayout": str(self.bull_payout),
            "bearPayout": str(self.bear_payout),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RoundRecord":
        """Rebuild a record from its cached JSON form.

        Raises KeyError, ValueError or an ArithmeticError on malformed input,
        including NaN and infinite amounts.
        """
        return cls(
            epoch=int(data["epoch"]),
            start_timestamp=int(data["startTimestamp"]),
            lock_timestamp=int(data["lockTimestamp"]),
            close_timestamp=int(data["closeTimestamp"]),
            lock_price=_finite_decimal(data, "lockPrice"),
            close_price=_finite_decimal(data, "closePrice"),
            total_amount=_finite_decimal(data, "totalAmount"),
            bull_amount=_finite_decimal(data, "bullAmount"),
            bear_amount=_finite_decimal(data, "bearAmount"),
            reward_base_cal_amount=_finite_decimal(data, "rewardBaseCalAmount"),
            reward_amount=_finite_decimal(data, "rewardAmount"),
            winner=Side(data["winner"]),
            bull_payout=_finite_decimal(data, "bullPayout"),
            bear_payout=_finite_decimal(data, "bearPayout"),
        )
