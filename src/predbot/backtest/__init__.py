"""Simulation engine package.

Provides the pure strategy evaluator, the sequential simulation engine, and
run helpers that wire them to the round repository.
"""

from predbot.backtest.engine import SimulationEngine
from predbot.backtest.models import (
    BetOutcome,
    EquityPoint,
    Report,
    RoundEvaluation,
    SimulationSettings,
    WalletBet,
    WalletReport,
    WalletState,
)
from predbot.backtest.runner import build_repository, run_backtest
from predbot.backtest.strategies import evaluate

__all__ = [
    "BetOutcome",
    "EquityPoint",
    "Report",
    "RoundEvaluation",
    "SimulationEngine",
    "SimulationSettings",
    "WalletBet",
    "WalletReport",
    "WalletState",
    "build_repository",
    "evaluate",
    "run_backtest",
]
