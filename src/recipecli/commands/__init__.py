"""Built-in CLI commands for recipecli.

Each sub-module defines a Typer app or command function that is
registered on the root application in :mod:`recipecli.app`.  Commands
that read recipes or favorites go through :func:`run_with_context`, which
resolves configuration from the root options, bootstraps the stores and
runs the async action inside a single event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer

from recipecli.models import GlobalConfig

T = TypeVar("T")


def settings(ctx: typer.Context) -> GlobalConfig:
    """Resolve the effective config using the root ``--cache-path`` / ``--ttl`` options."""
    from recipecli.config import resolve_config

    obj = ctx.obj or {}
    return resolve_config(
        cli_cache_path=obj.get("cache_path"),
        cli_ttl_seconds=obj.get("ttl"),
    )


def run_with_context(
    ctx: typer.Context,
    action: Callable[..., Awaitable[T]],
    *args: Any,
) -> T:
    """Bootstrap a :class:`~recipecli.context.RecipeContext` and await ``action(rc, *args)``."""
    from recipecli.context import bootstrap

    config = settings(ctx)

    async def _main() -> T:
        rc = await bootstrap(config)
        return await action(rc, *args)

    return asyncio.run(_main())
