"""Performance analytics for simulation reports.

Pure Decimal analytics: win_rate and max_drawdown over the capital curve.
No external dependencies (no pandas, numpy).
"""

from collections.abc import Iterable
from decimal import Decimal


def win_rate(wins: int, losses: int) -> Decimal | None:
    """Fraction of played bets that won.

    Returns:
        Win rate in [0, 1], or None if nothing was played.
    """
    total = wins + losses
    if total == 0:
        return None
    return Decimal(wins) / Decimal(total)


def max_drawdown(starting_capital: Decimal, capital_curve: Iterable[Decimal]) -> Decimal | None:
    """Largest peak-to-trough decline in capital.

    The starting capital counts as the first peak, so a run that only loses
    reports its full decline.

    Args:
        starting_capital: Capital before the first round.
        capital_curve: Total capital after each played round, in order.

    Returns:
        Max drawdown as a positive Decimal (0 if capital never fell), or None
        if no rounds were played.
    """
    peak = starting_capital
    worst = Decimal("0")
    seen = False

    for capital in capital_curve:
        seen = True
        if capital > peak:
            peak = capital
        drawdown = peak - capital
        if drawdown > worst:
            worst = drawdown

    return worst if seen else None
