"""JSON file persistence for the local round cache.

The cache is a single JSON array of RoundRecord objects, ordered by epoch and
overwritten wholesale after each successful refresh. A missing or unreadable
file is an empty cache, never an error.

CRITICAL: Decimals are written as strings and restored as Decimal on read.
"""

import json
import os
from pathlib import Path

from predbot.data.models import RoundRecord
from predbot.logging import get_logger

logger = get_logger(__name__)


class RoundCacheStore:
    """Reads and replaces the on-disk round cache.

    Usage:
        store = RoundCacheStore("data/rounds.json")
        rounds = store.load()
        store.save(rounds + new_rounds)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[RoundRecord]:
        """Return cached rounds sorted by epoch, or [] if absent or corrupt."""
        if not self._path.exists():
            logger.info("round_cache_missing", path=str(self._path))
            return []

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise ValueError("cache root is not a list")
            records = [RoundRecord.from_dict(item) for item in payload]
        except (OSError, ValueError, KeyError, TypeError, ArithmeticError) as e:
            # json.JSONDecodeError is a ValueError; int(inf) is an OverflowError
            logger.warning(
                "round_cache_corrupt",
                path=str(self._path),
                error=str(e),
            )
            return []

        # first occurrence per epoch wins
        by_epoch: dict[int, RoundRecord] = {}
        for record in records:
            by_epoch.setdefault(record.epoch, record)
        if len(by_epoch) != len(records):
            logger.warning(
                "round_cache_duplicate_epochs",
                path=str(self._path),
                dropped=len(records) - len(by_epoch),
            )
        records = sorted(by_epoch.values(), key=lambda r: r.epoch)

        logger.debug(
            "round_cache_loaded",
            path=str(self._path),
            rounds=len(records),
        )
        return records

    def save(self, records: list[RoundRecord]) -> None:
        """Overwrite the cache with ``records``, sorted by epoch.

        Writes to a sibling temp file first so a crash mid-write leaves the
        previous cache intact. Raises OSError if the cache cannot be written;
        the temp file is removed in that case.
        """
        ordered = sorted(records, key=lambda r: r.epoch)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_text(
                json.dumps([r.to_dict() for r in ordered]),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info(
            "round_cache_saved",
            path=str(self._path),
            rounds=len(ordered),
        )
