"""Batched concurrent fetch of historical rounds from the ledger.

Epochs are split into batches of ``batch_size`` and batches are grouped into
sets of ``batches_per_group``. Every group runs concurrently; inside a group
batches run one after another; inside a batch every epoch is fetched
concurrently. This caps in-flight requests per batch, not overall: with N
groups up to N * batch_size requests can be outstanding at once. Set
``max_concurrent_fetches`` to add a hard cap; results are identical either
way because the caller re-sorts by epoch.

A fetch that raises, times out, or returns underivable data yields no record.
Failed epochs are dropped, never retried.
"""

import asyncio
import time
from collections.abc import Callable, Sequence

from predbot.config import HistoricalDataSettings, LedgerSettings
from predbot.data.models import RoundRecord
from predbot.data.payout import derive
from predbot.ledger.client import LedgerClient
from predbot.logging import get_logger

logger = get_logger(__name__)


def chunk(items: Sequence, size: int) -> list[list]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class RoundFetcher:
    """Fetches and derives RoundRecords for a list of epochs.

    Usage:
        fetcher = RoundFetcher(ledger, historical_settings, ledger_settings)
        records = await fetcher.fetch_rounds(range(100, 5000))
    """

    def __init__(
        self,
        ledger: LedgerClient,
        settings: HistoricalDataSettings,
        ledger_settings: LedgerSettings,
    ) -> None:
        self._ledger = ledger
        self._settings = settings
        self._timeout = ledger_settings.fetch_timeout_seconds
        self._semaphore: asyncio.Semaphore | None = None
        if settings.max_concurrent_fetches is not None:
            self._semaphore = asyncio.Semaphore(settings.max_concurrent_fetches)

    async def fetch_rounds(
        self,
        epochs: Sequence[int],
        progress_callback: Callable | None = None,
    ) -> list[RoundRecord]:
        """Fetch every epoch and return the derivable records in epoch order.

        ``progress_callback(done_batches, total_batches)`` is awaited after
        each batch completes, for callers that drive a progress display.
        """
        epochs = list(epochs)
        if not epochs:
            return []

        batches = chunk(epochs, self._settings.batch_size)
        groups = chunk(batches, self._settings.batches_per_group)
        start_time = time.monotonic()
        done = 0

        logger.info(
            "round_fetch_starting",
            epochs=len(epochs),
            first_epoch=epochs[0],
            last_epoch=epochs[-1],
            batches=len(batches),
            groups=len(groups),
        )

        async def _run_group(group: list[list[int]]) -> list[RoundRecord]:
            nonlocal done
            fetched: list[RoundRecord] = []
            for batch in group:
                results = await asyncio.gather(
                    *(self._fetch_one(epoch) for epoch in batch)
                )
                fetched.extend(r for r in results if r is not None)
                done += 1
                if progress_callback is not None:
                    await progress_callback(done, len(batches))
            return fetched

        group_results = await asyncio.gather(*(_run_group(g) for g in groups))

        records = sorted(
            (r for group in group_results for r in group),
            key=lambda r: r.epoch,
        )

        logger.info(
            "round_fetch_complete",
            requested=len(epochs),
            fetched=len(records),
            dropped=len(epochs) - len(records),
            duration_seconds=round(time.monotonic() - start_time, 1),
        )
        return records

    async def _fetch_one(self, epoch: int) -> RoundRecord | None:
        """Fetch and derive one round; any failure drops it."""
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    raw = await asyncio.wait_for(
                        self._ledger.get_round(epoch), self._timeout
                    )
            else:
                raw = await asyncio.wait_for(self._ledger.get_round(epoch), self._timeout)
        except Exception as e:
            logger.debug(
                "round_fetch_failed",
                epoch=epoch,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        return derive(raw)
