"""Historical round data layer.

Provides the RoundRecord model, payout derivation, the JSON round cache,
the batched ledger fetcher, and the repository that merges them.
"""

from predbot.data.fetcher import RoundFetcher
from predbot.data.models import RoundRecord
from predbot.data.payout import derive
from predbot.data.repository import RoundRepository
from predbot.data.store import RoundCacheStore

__all__ = [
    "RoundCacheStore",
    "RoundFetcher",
    "RoundRecord",
    "RoundRepository",
    "derive",
]
