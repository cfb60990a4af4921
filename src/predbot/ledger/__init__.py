"""Ledger client layer -- prediction contract access via web3."""

from predbot.ledger.client import LedgerClient
from predbot.ledger.web3_client import Web3LedgerClient

__all__ = ["LedgerClient", "Web3LedgerClient"]
