"""Abstract ledger client interface.

Defines the read-only contract the round repository depends on. The concrete
web3 binding lives in web3_client.py; tests substitute an in-memory fake.
"""

from abc import ABC, abstractmethod


class LedgerClient(ABC):
    """Abstract base class for prediction-contract readers."""

    @abstractmethod
    async def get_current_epoch(self) -> int:
        """Return the epoch of the round currently open for betting."""
        ...

    @abstractmethod
    async def get_round(self, epoch: int) -> dict:
        """Fetch raw data for one round.

        Returns a dict with keys: epoch, startTimestamp, lockTimestamp,
        closeTimestamp, lockPrice, closePrice, totalAmount, bullAmount,
        bearAmount, rewardBaseCalAmount, rewardAmount. Values are ints or
        numeric strings in the contract's native units.

        Raises on transport failure. Callers own timeouts and retries.
        """
        ...

    async def close(self) -> None:
        """Release transport resources. No-op by default."""
        return None
