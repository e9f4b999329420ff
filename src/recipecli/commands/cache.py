"""Cache commands -- inspect and maintain the local response cache."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import typer

from recipecli.commands import run_with_context
from recipecli.context import RecipeContext
from recipecli.models import CacheStats
from recipecli.output import format_response, info, success


cache_app = typer.Typer(no_args_is_help=True)


def _format_ms(value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat(timespec="seconds")


async def _stats(rc: RecipeContext) -> CacheStats:
    stats = await rc.cache.stats()
    data = stats.model_dump(mode="json")
    data["oldest"] = _format_ms(stats.oldest)
    data["newest"] = _format_ms(stats.newest)
    data["evicted_at_startup"] = rc.evicted
    format_response(data)
    return stats


async def _evict(rc: RecipeContext) -> int:
    removed = rc.evicted + await rc.cache.evict_expired()
    success(f"Removed {removed} expired entr{'y' if removed == 1 else 'ies'}.")
    return removed


async def _clear(rc: RecipeContext) -> int:
    removed = await rc.cache.clear()
    success(f"Cleared {removed} cache entr{'y' if removed == 1 else 'ies'}.")
    return removed


async def _invalidate(rc: RecipeContext, key: str) -> bool:
    if await rc.cache.invalidate(key):
        success(f"Removed '{key}' from the cache.")
        return True
    info(f"'{key}' is not cached.")
    return False


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show cache location, TTL and fresh/stale entry counts."""
    run_with_context(ctx, _stats)


@cache_app.command("evict")
def cache_evict(ctx: typer.Context) -> None:
    """Remove expired entries (also done automatically at startup)."""
    run_with_context(ctx, _evict)


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete every cached response."""
    if not yes and not typer.confirm("Delete all cached responses?"):
        info("Cancelled.")
        raise typer.Exit()
    run_with_context(ctx, _clear)


@cache_app.command("invalidate")
def cache_invalidate(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key, e.g. 'search_pasta' or 'recipe_52771'."),
) -> None:
    """Remove a single cached response."""
    run_with_context(ctx, _invalidate, key)
