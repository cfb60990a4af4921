"""Tests for the pure strategy evaluator.

All test cases use exact Decimal values. Fee is the contract's 3% on winnings.
"""

from decimal import Decimal

import pytest

from predbot.backtest.models import SimulationSettings, WalletState
from predbot.backtest.strategies import (
    evaluate,
    initial_wallets,
    weighted_side,
    winnings,
)
from predbot.models import Side, Strategy, WeightSide
from tests.factories import make_round

FEE = Decimal("0.03")


def _settings(
    strategy: Strategy,
    amount: str = "0.1",
    capital: str = "1",
    weight_side: WeightSide = WeightSide.LOWER_PAYOUT,
    weight_multiplier: int = 1,
) -> SimulationSettings:
    return SimulationSettings(
        strategy=strategy,
        amount_per_trade=Decimal(amount),
        capital_amount=Decimal(capital),
        weight_side=weight_side,
        weight_multiplier=weight_multiplier,
    )


def _wallet(capital: str = "1") -> tuple[WalletState, ...]:
    return (WalletState(capital=Decimal(capital)),)


class TestWinnings:
    """Tests for winnings()."""

    def test_fee_applied_to_winnings_only(self) -> None:
        # 0.1 * 2.0 * 0.97 = 0.194
        assert winnings(Decimal("0.1"), Decimal("2.0"), FEE) == Decimal("0.194")

    def test_zero_fee(self) -> None:
        assert winnings(Decimal("0.1"), Decimal("1.5"), Decimal("0")) == Decimal("0.15")


class TestBiggerVolume:
    """BIGGER_VOLUME backs the larger pool with that side's payout."""

    def test_backs_up_when_bull_pool_larger(self) -> None:
        round_ = make_round(
            winner=Side.UP,
            bull_amount=Decimal("3"),
            bear_amount=Decimal("2"),
            bull_payout=Decimal("1.667"),
        )
        result = evaluate(_wallet(), round_, _settings(Strategy.BIGGER_VOLUME), FEE)

        leg = result.outcome.legs[0]
        assert leg.side == Side.UP
        assert leg.payout == Decimal("1.667")
        assert leg.won is True
        # 1 - 0.1 + 0.1 * 1.667 * 0.97
        assert result.wallets[0].capital == Decimal("1.0616990")
        assert result.wallets[0].wins == 1

    def test_equal_pools_back_down(self) -> None:
        round_ = make_round(
            winner=Side.UP,
            bull_amount=Decimal("2"),
            bear_amount=Decimal("2"),
            bull_payout=Decimal("2"),
            bear_payout=Decimal("2"),
        )
        result = evaluate(_wallet(), round_, _settings(Strategy.BIGGER_VOLUME), FEE)

        assert result.outcome.legs[0].side == Side.DOWN
        assert result.outcome.won is False
        assert result.wallets[0].capital == Decimal("0.9")
        assert result.wallets[0].losses == 1


class TestSmallerVolume:
    """SMALLER_VOLUME backs the smaller pool but is paid the lower payout."""

    def test_backs_smaller_pool(self) -> None:
        round_ = make_round(
            winner=Side.UP,
            bull_amount=Decimal("3"),
            bear_amount=Decimal("2"),
        )
        result = evaluate(_wallet(), round_, _settings(Strategy.SMALLER_VOLUME), FEE)

        assert result.outcome.legs[0].side == Side.DOWN
        assert result.outcome.won is False

    def test_win_credits_lower_payout_not_backed_side_payout(self) -> None:
        """DOWN backed (payout 2.5) but credited with the lower UP payout 1.667."""
        round_ = make_round(
            winner=Side.DOWN,
            bull_amount=Decimal("3"),
            bear_amount=Decimal("2"),
            bull_payout=Decimal("1.667"),
            bear_payout=Decimal("2.5"),
        )
        result = evaluate(_wallet(), round_, _settings(Strategy.SMALLER_VOLUME), FEE)

        leg = result.outcome.legs[0]
        assert leg.side == Side.DOWN
        assert leg.won is True
        assert leg.payout == Decimal("1.667")
        # 0.1 * 1.667 * 0.97 = 0.161699
        assert leg.credit == Decimal("0.161699")
        assert result.wallets[0].capital == Decimal("1.061699")

    def test_equal_pools_back_up(self) -> None:
        round_ = make_round(
            winner=Side.UP,
            bull_amount=Decimal("2"),
            bear_amount=Decimal("2"),
            bull_payout=Decimal("2"),
            bear_payout=Decimal("2"),
        )
        result = evaluate(_wallet(), round_, _settings(Strategy.SMALLER_VOLUME), FEE)

        assert result.outcome.legs[0].side == Side.UP
        assert result.outcome.won is True


class TestFixedSide:
    """ALWAYS_UP and ALWAYS_DOWN ignore pool sizes."""

    def test_always_up_win(self) -> None:
        round_ = make_round(winner=Side.UP, bull_payout=Decimal("2.0"))
        result = evaluate(_wallet(), round_, _settings(Strategy.ALWAYS_UP), FEE)

        assert result.outcome.legs[0].credit == Decimal("0.194")
        assert result.wallets[0].capital == Decimal("1.094")

    def test_always_down_win_uses_bear_payout(self) -> None:
        round_ = make_round(winner=Side.DOWN, bear_payout=Decimal("2.5"))
        result = evaluate(_wallet(), round_, _settings(Strategy.ALWAYS_DOWN), FEE)

        leg = result.outcome.legs[0]
        assert leg.side == Side.DOWN
        assert leg.payout == Decimal("2.5")
        # 0.9 + 0.1 * 2.5 * 0.97
        assert result.wallets[0].capital == Decimal("1.1425")

    def test_loss_only_debits_stake(self) -> None:
        round_ = make_round(winner=Side.UP)
        result = evaluate(_wallet(), round_, _settings(Strategy.ALWAYS_DOWN), FEE)

        assert result.outcome.legs[0].credit == Decimal("0")
        assert result.wallets[0].capital == Decimal("0.9")
        assert result.wallets[0].wins == 0
        assert result.wallets[0].losses == 1


class TestSingleWalletExhaustion:
    """Debit below zero clamps to zero and ends the run."""

    def test_negative_after_debit_terminates(self) -> None:
        start = (WalletState(capital=Decimal("0.05"), wins=3, losses=4),)
        result = evaluate(start, make_round(), _settings(Strategy.ALWAYS_UP), FEE)

        assert result.terminated is True
        assert result.outcome is None
        assert result.wallets[0].capital == Decimal("0")
        assert result.wallets[0].wins == 3
        assert result.wallets[0].losses == 4

    def test_exactly_zero_after_debit_is_played(self) -> None:
        round_ = make_round(winner=Side.DOWN)
        result = evaluate(_wallet("0.1"), round_, _settings(Strategy.ALWAYS_UP), FEE)

        assert result.terminated is False
        assert result.wallets[0].capital == Decimal("0")
        assert result.wallets[0].losses == 1

    def test_inputs_not_mutated(self) -> None:
        start = _wallet()
        evaluate(start, make_round(), _settings(Strategy.ALWAYS_UP), FEE)
        assert start == (WalletState(capital=Decimal("1")),)


class TestWeightedSide:
    """Tests for weighted_side()."""

    def test_lower_payout(self) -> None:
        round_ = make_round(bull_payout=Decimal("1.5"), bear_payout=Decimal("3"))
        assert weighted_side(WeightSide.LOWER_PAYOUT, round_) == Side.UP

    def test_higher_payout(self) -> None:
        round_ = make_round(bull_payout=Decimal("1.5"), bear_payout=Decimal("3"))
        assert weighted_side(WeightSide.HIGHER_PAYOUT, round_) == Side.DOWN

    @pytest.mark.parametrize("weight", [WeightSide.LOWER_PAYOUT, WeightSide.HIGHER_PAYOUT])
    def test_equal_payouts_weight_down(self, weight: WeightSide) -> None:
        round_ = make_round(bull_payout=Decimal("2"), bear_payout=Decimal("2"))
        assert weighted_side(weight, round_) == Side.DOWN


class TestDualWallet:
    """DUAL_WALLET: wallet 0 backs UP, wallet 1 backs DOWN."""

    def test_initial_wallets_split_capital(self) -> None:
        wallets = initial_wallets(_settings(Strategy.DUAL_WALLET, capital="1"))
        assert wallets == (
            WalletState(capital=Decimal("0.5")),
            WalletState(capital=Decimal("0.5")),
        )

    def test_weighted_stakes_and_settlement(self) -> None:
        """Lower payout side (UP) stakes 0.1 * 3; DOWN stakes 0.1."""
        settings = _settings(
            Strategy.DUAL_WALLET,
            capital="2",
            weight_side=WeightSide.LOWER_PAYOUT,
            weight_multiplier=3,
        )
        round_ = make_round(
            winner=Side.UP,
            bull_payout=Decimal("1.5"),
            bear_payout=Decimal("3"),
        )
        result = evaluate(initial_wallets(settings), round_, settings, FEE)

        up_leg, down_leg = result.outcome.legs
        assert up_leg.side == Side.UP and up_leg.stake == Decimal("0.3")
        assert down_leg.side == Side.DOWN and down_leg.stake == Decimal("0.1")
        # UP wallet: 1 - 0.3 + 0.3 * 1.5 * 0.97 = 1.1365
        assert result.wallets[0].capital == Decimal("1.1365")
        # DOWN wallet: 1 - 0.1
        assert result.wallets[1].capital == Decimal("0.9")

    def test_exactly_one_wallet_wins(self) -> None:
        settings = _settings(Strategy.DUAL_WALLET)
        result = evaluate(initial_wallets(settings), make_round(winner=Side.DOWN), settings, FEE)

        up_wallet, down_wallet = result.wallets
        assert (up_wallet.wins, up_wallet.losses) == (0, 1)
        assert (down_wallet.wins, down_wallet.losses) == (1, 0)

    def test_terminates_below_twice_stake_without_debit(self) -> None:
        settings = _settings(Strategy.DUAL_WALLET, weight_multiplier=2)
        wallets = (
            WalletState(capital=Decimal("0.39")),  # UP weighted: stake 0.2, needs 0.4
            WalletState(capital=Decimal("5")),
        )
        round_ = make_round(bull_payout=Decimal("1.5"), bear_payout=Decimal("3"))

        result = evaluate(wallets, round_, settings, FEE)

        assert result.terminated is True
        assert result.outcome is None
        assert result.wallets == wallets

    def test_exactly_twice_stake_is_played(self) -> None:
        settings = _settings(Strategy.DUAL_WALLET)
        wallets = (WalletState(capital=Decimal("0.2")), WalletState(capital=Decimal("0.2")))

        result = evaluate(wallets, make_round(winner=Side.UP), settings, FEE)

        assert result.terminated is False

    def test_wrong_wallet_count_raises(self) -> None:
        with pytest.raises(ValueError):
            evaluate(_wallet(), make_round(), _settings(Strategy.DUAL_WALLET), FEE)
