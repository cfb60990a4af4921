"""Payout derivation for raw ledger rounds.

Turns the raw pool amounts and prices reported by the ledger into a
RoundRecord carrying the winning side and each side's payout multiplier.

payout = totalAmount / sideAmount, rounded to 3 decimals (ROUND_HALF_UP).
This is the only place in the codebase where rounding is applied.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from predbot.data.models import RoundRecord
from predbot.exceptions import RoundDerivationError
from predbot.logging import get_logger
from predbot.models import Side

logger = get_logger(__name__)

PAYOUT_QUANTUM = Decimal("0.001")


def _to_decimal(raw: Mapping, key: str) -> Decimal:
    value = raw[key]
    if value is None or isinstance(value, bool):
        raise RoundDerivationError(f"{key} is not numeric: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise RoundDerivationError(f"{key} is not numeric: {value!r}") from e
    if not result.is_finite():
        raise RoundDerivationError(f"{key} is not finite: {value!r}")
    return result


def payout_multiplier(total_amount: Decimal, side_amount: Decimal) -> Decimal:
    """Return total/side rounded half-up to 3 fractional digits.

    Raises RoundDerivationError when the side pool is empty.
    """
    if side_amount == 0:
        raise RoundDerivationError("side pool amount is zero")
    return (total_amount / side_amount).quantize(PAYOUT_QUANTUM, rounding=ROUND_HALF_UP)


def winning_side(lock_price: Decimal, close_price: Decimal) -> Side:
    """UP only when the close is strictly above the lock; a tie resolves DOWN."""
    return Side.UP if close_price > lock_price else Side.DOWN


def derive(raw: Mapping) -> RoundRecord | None:
    """Build a RoundRecord from raw ledger data, or None if it cannot be derived.

    Missing keys, non-numeric values and empty side pools all yield None so the
    caller can drop the round.
    """
    try:
        lock_price = _to_decimal(raw, "lockPrice")
        close_price = _to_decimal(raw, "closePrice")
        total_amount = _to_decimal(raw, "totalAmount")
        bull_amount = _to_decimal(raw, "bullAmount")
        bear_amount = _to_decimal(raw, "bearAmount")

        return RoundRecord(
            epoch=int(raw["epoch"]),
            start_timestamp=int(raw["startTimestamp"]),
            lock_timestamp=int(raw["lockTimestamp"]),
            close_timestamp=int(raw["closeTimestamp"]),
            lock_price=lock_price,
            close_price=close_price,
            total_amount=total_amount,
            bull_amount=bull_amount,
            bear_amount=bear_amount,
            reward_base_cal_amount=_to_decimal(raw, "rewardBaseCalAmount"),
            reward_amount=_to_decimal(raw, "rewardAmount"),
            winner=winning_side(lock_price, close_price),
            bull_payout=payout_multiplier(total_amount, bull_amount),
            bear_payout=payout_multiplier(total_amount, bear_amount),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError, RoundDerivationError) as e:
        logger.debug(
            "round_derivation_failed",
            epoch=raw.get("epoch") if isinstance(raw, Mapping) else None,
            error=str(e),
        )
        return None
