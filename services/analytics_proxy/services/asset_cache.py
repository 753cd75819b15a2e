"""
Asset Cache - TTL cache for static asset bodies.

Avoids refetching immutable files from the asset upstream. Only the body
bytes are kept; headers and content-type are not stored.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TLRUCache

logger = logging.getLogger("analytics_proxy.asset_cache")


@dataclass(frozen=True)
class CacheEntry:
    data: bytes
    ttl: float
    created_at: float


def _entry_expiry(key: str, entry: CacheEntry, now: float) -> float:
    return entry.created_at + entry.ttl


class AssetCache:
    """
    Keyed byte store with per-entry time-to-live using cachetools.

    Note: This cache is designed for single-threaded async environments (FastAPI/uvicorn).
    All operations are atomic in this context, so no locking is required.
    Two requests missing the same key may both store it; the last write wins.
    """

    def __init__(
        self,
        default_ttl: float = 3600.0,
        max_entries: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            default_ttl: TTL in seconds used when set() is called without one
            max_entries: capacity bound of the underlying store
            timer: monotonic clock, replaceable in tests
        """
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._timer = timer
        self._cache = TLRUCache(maxsize=max_entries, ttu=_entry_expiry, timer=timer)

        logger.debug(f"AssetCache initialized: max_entries={max_entries}, ttl={default_ttl}s")

    def get(self, key: str) -> Optional[bytes]:
        """
        Get cached bytes for key.

        Returns:
            Cached bytes, or None if not found or expired
        """
        entry = self._cache.get(key)
        return entry.data if entry is not None else None

    def set(self, key: str, data: bytes, ttl: Optional[float] = None) -> None:
        """
        Cache bytes under key.

        Args:
            key: path + query of the asset
            data: response body
            ttl: lifetime in seconds (default: default_ttl)
        """
        ttl = self.default_ttl if ttl is None else ttl
        self._cache[key] = CacheEntry(data=data, ttl=ttl, created_at=self._timer())

    def __len__(self) -> int:
        return len(self._cache)
