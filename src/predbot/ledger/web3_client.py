"""Prediction contract reader over web3 async.

Wraps AsyncWeb3 with the two view calls the backtester needs:
currentEpoch() and rounds(epoch). Only the ABI fragment for those calls is
bundled; values come back in the contract's native units (wei, 1e8 prices).
"""

from web3 import AsyncWeb3

from predbot.config import LedgerSettings
from predbot.exceptions import LedgerError
from predbot.ledger.client import LedgerClient
from predbot.logging import get_logger

logger = get_logger(__name__)

# Output order of PancakePredictionV2.rounds(uint256)
ROUND_FIELDS = (
    "epoch",
    "startTimestamp",
    "lockTimestamp",
    "closeTimestamp",
    "lockPrice",
    "closePrice",
    "lockOracleId",
    "closeOracleId",
    "totalAmount",
    "bullAmount",
    "bearAmount",
    "rewardBaseCalAmount",
    "rewardAmount",
    "oracleCalled",
)

_ROUND_TYPES = (
    "uint256",
    "uint256",
    "uint256",
    "uint256",
    "int256",
    "int256",
    "uint256",
    "uint256",
    "uint256",
    "uint256",
    "uint256",
    "uint256",
    "uint256",
    "bool",
)

PREDICTION_ABI = [
    {
        "inputs": [],
        "name": "currentEpoch",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "name": "rounds",
        "outputs": [
            {"internalType": abi_type, "name": name, "type": abi_type}
            for name, abi_type in zip(ROUND_FIELDS, _ROUND_TYPES)
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


class Web3LedgerClient(LedgerClient):
    """Concrete ledger client reading a prediction contract over HTTP RPC."""

    def __init__(self, settings: LedgerSettings) -> None:
        self._settings = settings
        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.provider_url))
        self._contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(settings.contract_address),
            abi=PREDICTION_ABI,
        )

    async def get_current_epoch(self) -> int:
        epoch = await self._contract.functions.currentEpoch().call()
        logger.debug("current_epoch_fetched", epoch=epoch)
        return int(epoch)

    async def get_round(self, epoch: int) -> dict:
        values = await self._contract.functions.rounds(epoch).call()
        if len(values) != len(ROUND_FIELDS):
            raise LedgerError(
                f"rounds({epoch}) returned {len(values)} fields, "
                f"expected {len(ROUND_FIELDS)}"
            )
        return dict(zip(ROUND_FIELDS, values))

    async def close(self) -> None:
        """Close the provider's HTTP session."""
        logger.info("closing_ledger_connection", provider=self._settings.provider_url)
        await self._w3.provider.disconnect()
