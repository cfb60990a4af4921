"""Round repository: cached, incrementally refreshed round history.

Merges the persisted round cache with rounds newly fetched from the ledger
and returns a single epoch-ascending sequence for the simulation engine.

Refresh policy:
- Rounds below ``min_epoch`` are never fetched.
- The open round (currentEpoch) is never fetched.
- When fewer than ``stale_epoch_threshold`` epochs have elapsed since the
  newest cached round, the cache is returned as-is.
"""

from collections.abc import Callable

from predbot.config import HistoricalDataSettings
from predbot.data.fetcher import RoundFetcher
from predbot.data.models import RoundRecord
from predbot.data.store import RoundCacheStore
from predbot.ledger.client import LedgerClient
from predbot.logging import get_logger

logger = get_logger(__name__)


class RoundRepository:
    """Loads the ordered round history, refreshing the cache when worthwhile.

    Args:
        ledger: Read-only ledger capability (injected; no global binding).
        store: Persistence for the JSON round cache.
        fetcher: Batched fetcher used to pull missing epochs.
        settings: Epoch floor, staleness threshold, batching shape.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        store: RoundCacheStore,
        fetcher: RoundFetcher,
        settings: HistoricalDataSettings,
    ) -> None:
        self._ledger = ledger
        self._store = store
        self._fetcher = fetcher
        self._settings = settings

    async def load(self, progress_callback: Callable | None = None) -> list[RoundRecord]:
        """Return all known rounds ascending by epoch, fetching missing ones first."""
        cached = self._store.load()
        start_epoch = self._start_epoch(cached)

        try:
            current_epoch = await self._ledger.get_current_epoch()
        except Exception as e:
            logger.warning(
                "current_epoch_unavailable",
                error_type=type(e).__name__,
                error=str(e),
                cached_rounds=len(cached),
            )
            return cached

        if current_epoch - start_epoch < self._settings.stale_epoch_threshold:
            logger.info(
                "round_refresh_skipped",
                current_epoch=current_epoch,
                start_epoch=start_epoch,
                cached_rounds=len(cached),
            )
            return cached

        known = {r.epoch for r in cached}
        missing = [
            epoch for epoch in range(start_epoch, current_epoch) if epoch not in known
        ]

        logger.info(
            "round_refresh_start",
            current_epoch=current_epoch,
            start_epoch=start_epoch,
            cached_rounds=len(cached),
            missing_rounds=len(missing),
        )

        fetched = await self._fetcher.fetch_rounds(missing, progress_callback)
        if not fetched:
            logger.info("round_refresh_no_new_rounds", current_epoch=current_epoch)
            return cached

        merged = self.merge(cached, fetched)
        try:
            self._store.save(merged)
        except OSError as e:
            # the fetched rounds are still returned for this run
            logger.warning(
                "round_cache_save_failed",
                path=str(self._store.path),
                error_type=type(e).__name__,
                error=str(e),
            )

        logger.info(
            "round_refresh_complete",
            new_rounds=len(fetched),
            total_rounds=len(merged),
            newest_epoch=merged[-1].epoch,
        )
        return merged

    def _start_epoch(self, cached: list[RoundRecord]) -> int:
        floor = self._settings.min_epoch
        if not cached:
            return floor
        return max(cached[-1].epoch, floor)

    @staticmethod
    def merge(cached: list[RoundRecord], fetched: list[RoundRecord]) -> list[RoundRecord]:
        """Union by epoch (cached wins on collision), sorted ascending."""
        by_epoch = {r.epoch: r for r in fetched}
        by_epoch.update({r.epoch: r for r in cached})
        return [by_epoch[epoch] for epoch in sorted(by_epoch)]
