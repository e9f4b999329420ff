"""Process-wide wiring: configuration, cache, favorites and API client.

:func:`bootstrap` runs once per command that touches data.  It makes sure
the cache and favorites files exist (both in parallel), then evicts
expired cache entries a single time so that lookups during the rest of the
process never have to scan for them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from recipecli.cache import RecipeCache
from recipecli.client import MealDBClient
from recipecli.favorites import FavoritesStore
from recipecli.models import GlobalConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Tests swap in an httpx.MockTransport here.
_transport: Optional[httpx.AsyncBaseTransport] = None


@dataclass
class RecipeContext:
    """Everything a command needs, built by :func:`bootstrap`."""

    config: GlobalConfig
    cache: RecipeCache
    favorites: FavoritesStore
    evicted: int = 0

    def client(self) -> MealDBClient:
        """A fresh API client; use it as an async context manager."""
        return MealDBClient(self.config.api, transport=_transport)

    async def lookup(
        self,
        key: str,
        fetch: Callable[[MealDBClient], Awaitable[T]],
        force_refresh: bool = False,
    ) -> T:
        """Serve *key* from the cache, calling *fetch* with a live client on a miss."""

        async def fetch_fn() -> T:
            async with self.client() as client:
                return await fetch(client)

        return await self.cache.get_or_fetch(key, fetch_fn, force_refresh=force_refresh)


async def bootstrap(config: GlobalConfig) -> RecipeContext:
    """Create the stores, initialise both files and evict expired cache entries.

    Raises:
        StorageUnavailable: If either file cannot be created.
    """
    cache = RecipeCache.from_path(_expand(config.cache.path), config.cache.ttl_seconds)
    favorites = FavoritesStore(_expand(config.favorites.path))

    await asyncio.gather(
        cache.ensure_initialized(),
        asyncio.to_thread(favorites.ensure_initialized),
    )
    evicted = await cache.evict_expired()
    if evicted:
        logger.info("Removed %d expired cache entries", evicted)
    return RecipeContext(config=config, cache=cache, favorites=favorites, evicted=evicted)


def _expand(path: Optional[str]) -> Path:
    if path is None:
        raise ValueError("path must be resolved before bootstrap")
    return Path(path).expanduser()
