"""Strategy evaluator: one round in, new wallet state and bet outcome out.

Pure functions only. Given the wallets before a round, the round record and
the run settings, ``evaluate`` returns the wallets after the round plus what
was wagered. Nothing here logs, mutates, or rounds.

Single-wallet strategies (BIGGER_VOLUME, SMALLER_VOLUME, ALWAYS_DOWN, ALWAYS_UP):
  - debit the stake; a negative balance is clamped to zero and ends the run
    without counting the round
  - on a win credit stake * payout * (1 - fee)

DUAL_WALLET:
  - wallet 0 always backs UP, wallet 1 always backs DOWN
  - one side is weighted (stake * weight_multiplier) by payout ranking
  - the run ends before any debit once a wallet holds less than twice its stake
  - balances are not clamped
"""

from collections.abc import Callable
from dataclasses import replace
from decimal import Decimal

from predbot.backtest.models import (
    BetOutcome,
    RoundEvaluation,
    SimulationSettings,
    WalletBet,
    WalletState,
)
from predbot.data.models import RoundRecord
from predbot.models import Side, Strategy, WeightSide

ZERO = Decimal("0")

# Wallet order for DUAL_WALLET
DUAL_WALLET_SIDES = (Side.UP, Side.DOWN)


def _bigger_volume(round_: RoundRecord) -> tuple[Side, Decimal]:
    side = Side.UP if round_.bull_amount > round_.bear_amount else Side.DOWN
    return side, round_.payout_for(side)


def _smaller_volume(round_: RoundRecord) -> tuple[Side, Decimal]:
    # The payout is the lower multiplier regardless of the side backed.
    side = Side.DOWN if round_.bull_amount > round_.bear_amount else Side.UP
    lower_payout = (
        round_.bear_payout
        if round_.bull_payout > round_.bear_payout
        else round_.bull_payout
    )
    return side, lower_payout


def _always_down(round_: RoundRecord) -> tuple[Side, Decimal]:
    return Side.DOWN, round_.bear_payout


def _always_up(round_: RoundRecord) -> tuple[Side, Decimal]:
    return Side.UP, round_.bull_payout


SIDE_PICKERS: dict[Strategy, Callable[[RoundRecord], tuple[Side, Decimal]]] = {
    Strategy.BIGGER_VOLUME: _bigger_volume,
    Strategy.SMALLER_VOLUME: _smaller_volume,
    Strategy.ALWAYS_DOWN: _always_down,
    Strategy.ALWAYS_UP: _always_up,
}


def winnings(stake: Decimal, payout: Decimal, fee: Decimal) -> Decimal:
    """Amount credited for a winning stake after the fee on winnings."""
    return stake * payout * (Decimal("1") - fee)


def weighted_side(weight_side: WeightSide, round_: RoundRecord) -> Side:
    """Side that receives the multiplied stake. Equal payouts weight DOWN."""
    if weight_side is WeightSide.LOWER_PAYOUT:
        return Side.UP if round_.bull_payout < round_.bear_payout else Side.DOWN
    return Side.UP if round_.bull_payout > round_.bear_payout else Side.DOWN


def initial_wallets(settings: SimulationSettings) -> tuple[WalletState, ...]:
    """Seed one wallet with all capital, or two with half each."""
    count = settings.strategy.wallet_count
    return tuple(
        WalletState(capital=settings.capital_amount / count) for _ in range(count)
    )


def _settle(wallet: WalletState, leg: WalletBet) -> WalletState:
    if leg.won:
        return replace(wallet, capital=wallet.capital + leg.credit, wins=wallet.wins + 1)
    return replace(wallet, losses=wallet.losses + 1)


def _evaluate_single(
    wallet: WalletState,
    round_: RoundRecord,
    settings: SimulationSettings,
    fee: Decimal,
) -> RoundEvaluation:
    stake = settings.amount_per_trade
    debited = replace(wallet, capital=wallet.capital - stake)

    if debited.capital < ZERO:
        return RoundEvaluation(
            wallets=(replace(wallet, capital=ZERO),),
            outcome=None,
            terminated=True,
        )

    side, payout = SIDE_PICKERS[settings.strategy](round_)
    won = side is round_.winner
    leg = WalletBet(
        side=side,
        stake=stake,
        payout=payout,
        won=won,
        credit=winnings(stake, payout, fee) if won else ZERO,
    )
    return RoundEvaluation(
        wallets=(_settle(debited, leg),),
        outcome=BetOutcome(epoch=round_.epoch, winner=round_.winner, legs=(leg,)),
    )


def _evaluate_dual(
    wallets: tuple[WalletState, ...],
    round_: RoundRecord,
    settings: SimulationSettings,
    fee: Decimal,
) -> RoundEvaluation:
    heavy = weighted_side(settings.weight_side, round_)
    stakes = tuple(
        settings.amount_per_trade * (settings.weight_multiplier if side is heavy else 1)
        for side in DUAL_WALLET_SIDES
    )

    if any(w.capital < stake * 2 for w, stake in zip(wallets, stakes)):
        return RoundEvaluation(wallets=wallets, outcome=None, terminated=True)

    legs = []
    settled = []
    for wallet, side, stake in zip(wallets, DUAL_WALLET_SIDES, stakes):
        payout = round_.payout_for(side)
        won = side is round_.winner
        leg = WalletBet(
            side=side,
            stake=stake,
            payout=payout,
            won=won,
            credit=winnings(stake, payout, fee) if won else ZERO,
        )
        legs.append(leg)
        settled.append(_settle(replace(wallet, capital=wallet.capital - stake), leg))

    return RoundEvaluation(
        wallets=tuple(settled),
        outcome=BetOutcome(epoch=round_.epoch, winner=round_.winner, legs=tuple(legs)),
    )


def evaluate(
    wallets: tuple[WalletState, ...],
    round_: RoundRecord,
    settings: SimulationSettings,
    fee: Decimal,
) -> RoundEvaluation:
    """Play one round for the configured strategy.

    Args:
        wallets: Wallet states before the round (one, or two for DUAL_WALLET).
        round_: The resolved round to wager on.
        settings: Strategy, stake, and dual-wallet weighting.
        fee: Fraction of winnings withheld (e.g. Decimal("0.03")).

    Returns:
        RoundEvaluation with the new wallets and the bet outcome, or
        ``terminated=True`` when the wallets can no longer cover the stake.
    """
    if len(wallets) != settings.strategy.wallet_count:
        raise ValueError(
            f"{settings.strategy.value} needs {settings.strategy.wallet_count} "
            f"wallet(s), got {len(wallets)}"
        )

    if settings.strategy is Strategy.DUAL_WALLET:
        return _evaluate_dual(wallets, round_, settings, fee)
    return _evaluate_single(wallets[0], round_, settings, fee)
