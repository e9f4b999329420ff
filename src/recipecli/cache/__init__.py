"""Durable response caching for recipecli.

This package provides :class:`RecipeCache`, a JSON-file cache with a
per-entry write timestamp and a configurable TTL.  Lookups go through
:meth:`RecipeCache.get_or_fetch`, which serves fresh entries, fetches and
stores on a miss, and falls back to stale entries when the fetch fails.

The cache is built by :func:`recipecli.context.bootstrap` from the ``cache``
section of :class:`~recipecli.models.GlobalConfig`.
"""

from recipecli.cache.cache import RecipeCache, wall_clock_ms

__all__ = ["RecipeCache", "wall_clock_ms"]
