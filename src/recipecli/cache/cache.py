"""Durable TTL cache with stale fallback for recipe API responses.

:class:`RecipeCache` keeps ``key -> {timestamp, data}`` entries in a single
JSON document (see :class:`~recipecli.storage.JsonDocumentStore`).  Expiry
is a read-time filter: an entry older than the TTL is skipped by
:meth:`~RecipeCache.get` but stays on disk until
:meth:`~RecipeCache.evict_expired` removes it.  That leftover copy is what
:meth:`~RecipeCache.get_or_fetch` serves when the remote fetch fails.

Every access to the document happens under one :class:`asyncio.Lock` and
re-reads the file first, so overlapping coroutines in the same process
never lose each other's writes.  Fetch functions run outside the lock.
Cross-process writers are not supported.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from recipecli.exceptions import NoDataAvailable, StorageUnavailable
from recipecli.models import CacheEntry, CacheStats
from recipecli.storage import JsonDocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()
_ENTRY = TypeAdapter(CacheEntry)


def wall_clock_ms() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)


class RecipeCache:
    """Expiry-aware key/value cache over a JSON file.

    Args:
        store: Backing document store holding a ``dict`` document.
        ttl_seconds: Entries whose age reaches this many seconds are stale.
        clock: Zero-argument callable returning "now" in milliseconds.
            Tests inject a fake clock here.

    Example::

        cache = RecipeCache(JsonDocumentStore(path), ttl_seconds=86400)
        meals = await cache.get_or_fetch(
            "search_pasta", lambda: client.search_by_name("pasta")
        )
    """

    def __init__(
        self,
        store: JsonDocumentStore,
        ttl_seconds: float,
        clock: Callable[[], int] = wall_clock_ms,
    ) -> None:
        if not math.isfinite(ttl_seconds) or ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be a positive finite number")
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock
        self._lock = asyncio.Lock()

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        ttl_seconds: float,
        clock: Callable[[], int] = wall_clock_ms,
    ) -> RecipeCache:
        """Build a cache whose backing document lives at *path*."""
        return cls(JsonDocumentStore(path, container=dict), ttl_seconds, clock)

    @property
    def path(self) -> Path:
        return self._store.path

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    # ------------------------------------------------------------------ #
    # Bootstrap
    # ------------------------------------------------------------------ #

    async def ensure_initialized(self) -> None:
        """Create the cache file as ``{}`` if it does not exist yet.

        Raises:
            StorageUnavailable: If the file or its directory cannot be created.
        """
        async with self._lock:
            await asyncio.to_thread(self._store.ensure_initialized)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for *key* if it is still fresh, else *default*.

        A stale entry is left in place; only :meth:`evict_expired` deletes.
        """
        async with self._lock:
            entries = await self._read_entries()
        entry = entries.get(key)
        if entry is None or not entry.is_fresh(self._clock(), self._ttl_ms):
            return default
        return entry.value

    async def get_ignoring_freshness(self, key: str, default: Any = None) -> Any:
        """Return the cached value for *key* regardless of its age, else *default*."""
        async with self._lock:
            entries = await self._read_entries()
        entry = entries.get(key)
        if entry is None:
            return default
        return entry.value

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    async def put(self, key: str, value: Any) -> None:
        """Store *value* under *key* stamped with the current time.

        The timestamp never moves backwards for a key, even if the clock
        does.

        Raises:
            StorageUnavailable: If the document cannot be written.
        """
        async with self._lock:
            await asyncio.to_thread(self._store.ensure_initialized)
            entries = await self._read_entries()
            now = self._clock()
            previous = entries.get(key)
            if previous is not None and previous.stored_at > now:
                now = previous.stored_at
            entries[key] = CacheEntry(stored_at=now, value=value)
            await self._write_entries(entries)

    async def evict_expired(self) -> int:
        """Delete every entry whose age has reached the TTL.

        Intended to run once at startup.  The file is rewritten only when
        something was removed.

        Returns:
            The number of entries removed.
        """
        async with self._lock:
            await asyncio.to_thread(self._store.ensure_initialized)
            entries = await self._read_entries()
            now = self._clock()
            expired = [
                key for key, entry in entries.items()
                if not entry.is_fresh(now, self._ttl_ms)
            ]
            for key in expired:
                del entries[key]
            if expired:
                await self._write_entries(entries)
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    async def invalidate(self, key: str) -> bool:
        """Remove a single entry.  Returns ``True`` if it existed."""
        async with self._lock:
            entries = await self._read_entries()
            if key not in entries:
                return False
            del entries[key]
            await self._write_entries(entries)
        return True

    async def clear(self) -> int:
        """Remove every entry and return how many there were."""
        async with self._lock:
            await asyncio.to_thread(self._store.ensure_initialized)
            entries = await self._read_entries()
            await self._write_entries({})
        return len(entries)

    async def stats(self) -> CacheStats:
        """Count fresh and stale entries and report the timestamp range."""
        async with self._lock:
            entries = await self._read_entries()
        now = self._clock()
        fresh = sum(1 for e in entries.values() if e.is_fresh(now, self._ttl_ms))
        stamps = [e.stored_at for e in entries.values()]
        return CacheStats(
            path=str(self.path),
            ttl_seconds=self._ttl_seconds,
            entries=len(entries),
            fresh=fresh,
            stale=len(entries) - fresh,
            oldest=min(stamps) if stamps else None,
            newest=max(stamps) if stamps else None,
        )

    # ------------------------------------------------------------------ #
    # Orchestration
    # ------------------------------------------------------------------ #

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        force_refresh: bool = False,
    ) -> T:
        """Serve *key* from the cache, fetching and storing it on a miss.

        1. Unless *force_refresh*, a fresh cached value is returned without
           calling *fetch_fn*.
        2. Otherwise *fetch_fn* is awaited.  Its result is cached and
           returned, even when it is falsy (an empty list is a valid answer).
        3. If *fetch_fn* raises, any cached value for *key* is returned
           regardless of age.

        Args:
            key: Cache key.
            fetch_fn: Zero-argument callable returning an awaitable.
            force_refresh: Skip the fresh-cache check.

        Raises:
            NoDataAvailable: *fetch_fn* failed and nothing is cached for
                *key*.  The fetch error is chained as ``__cause__``.
        """
        if not force_refresh:
            cached = await self.get(key, _MISSING)
            if cached is not _MISSING:
                logger.debug("Cache hit for %r", key)
                return cached
            logger.debug("Cache miss for %r", key)
        else:
            logger.debug("Refreshing %r", key)

        try:
            result = await fetch_fn()
        except Exception as exc:
            stale = await self.get_ignoring_freshness(key, _MISSING)
            if stale is _MISSING:
                raise NoDataAvailable(key, exc) from exc
            logger.info("Fetch for %r failed (%s); serving cached copy", key, exc)
            return stale

        try:
            await self.put(key, result)
        except StorageUnavailable as exc:
            logger.warning("Could not cache %r: %s", key, exc)
        return result

    # ------------------------------------------------------------------ #
    # Private helpers (call with the lock held)
    # ------------------------------------------------------------------ #

    async def _read_entries(self) -> dict[str, CacheEntry]:
        raw = await asyncio.to_thread(self._store.load)
        entries: dict[str, CacheEntry] = {}
        skipped = []
        for key, item in raw.items():
            try:
                entries[key] = _ENTRY.validate_python(item)
            except ValidationError:
                skipped.append(key)
        if skipped:
            logger.warning(
                "Cache file %s: skipping %d malformed entries: %s",
                self.path,
                len(skipped),
                ", ".join(repr(k) for k in skipped),
            )
        return entries

    async def _write_entries(self, entries: dict[str, CacheEntry]) -> None:
        document = {
            key: entry.model_dump(mode="json", by_alias=True)
            for key, entry in entries.items()
        }
        await asyncio.to_thread(self._store.save, document)
