"""Custom exceptions for the prediction backtester.

Ledger, data, and simulation exceptions live here to avoid circular imports
between modules.
"""


class PredBotError(Exception):
    """Base exception for all backtester errors."""


class ConfigurationError(PredBotError):
    """Raised when simulation settings cannot produce a meaningful run."""


class RoundDerivationError(PredBotError):
    """Raised when raw round data cannot be turned into a RoundRecord."""


class LedgerError(PredBotError):
    """Raised when the ledger returns a response of unexpected shape."""
