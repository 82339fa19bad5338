import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Optional

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]

DEFAULT_STALE_TIME = 10 * 60  # seconds
DEFAULT_RETRIES = 3
DEFAULT_MAX_ENTRIES = 256
RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 30.0


def retry_delay(attempt: int) -> float:
    """Exponential backoff: 1s, 2s, 4s ... capped at 30s."""
    return min(RETRY_BASE_DELAY * (2**attempt), RETRY_MAX_DELAY)


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float
    invalidated: bool = False


class QueryCache:
    """Key to entry cache with staleness timestamps and manual invalidation.

    Holds at most ``max_entries`` keys, evicting the least recently used.
    """

    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME,
        retries: int = DEFAULT_RETRIES,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.stale_time = stale_time
        self.retries = retries
        self.max_entries = max_entries
        self._clock = clock
        self._sleep = sleep
        # least recently used first
        self._entries: OrderedDict[QueryKey, CacheEntry] = OrderedDict()

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        return self._clock() - entry.fetched_at >= self.stale_time

    def get(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def __len__(self):
        return len(self._entries)

    def set(self, key: QueryKey, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data, fetched_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted query %r", evicted)

    async def fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return fresh cached data for ``key`` or fetch, store and return it."""
        if not self.is_stale(key):
            self._entries.move_to_end(key)
            return self._entries[key].data
        data = await self._fetch_with_retry(key, fetcher)
        self.set(key, data)
        return data

    async def _fetch_with_retry(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        attempt = 0
        while True:
            try:
                return await fetcher()
            except Exception as e:
                if attempt >= self.retries:
                    raise
                delay = retry_delay(attempt)
                logger.debug("Query %r attempt %d failed (%s), retrying in %ss", key, attempt + 1, e, delay)
                await self._sleep(delay)
                attempt += 1

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every entry whose key starts with ``prefix`` as stale.

        Returns the number of entries marked.
        """
        marked = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                entry.invalidated = True
                marked += 1
        return marked

    def clear(self, prefix: Optional[QueryKey] = None) -> None:
        if prefix is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[: len(prefix)] == prefix]:
            del self._entries[key]
