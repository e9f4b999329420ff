"""Favorites commands -- list, show, add and remove saved recipes.

Favorites are stored as full recipe objects, so ``list`` and ``show`` work
offline.  ``add`` looks the recipe up through the cache first.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from recipecli.commands import run_with_context
from recipecli.commands.recipes import recipe_key
from recipecli.context import RecipeContext
from recipecli.exceptions import NotFoundError
from recipecli.formatting import show_recipe, show_recipe_list
from recipecli.output import info, success, suggest


favorites_app = typer.Typer(no_args_is_help=True)


async def list_favorites(rc: RecipeContext) -> list[dict[str, Any]]:
    favorites = await asyncio.to_thread(rc.favorites.entries)
    if not favorites:
        info("You have no favorite recipes.")
        suggest("Add one with: recipecli favorites add <recipe-id>")
        return favorites
    show_recipe_list(favorites, title="Favorites")
    return favorites


async def show_favorite(rc: RecipeContext, recipe_id: str) -> dict[str, Any]:
    meal = await asyncio.to_thread(rc.favorites.get, recipe_id)
    if meal is None:
        raise NotFoundError(f"Recipe {recipe_id} is not in your favorites")
    show_recipe(meal)
    return meal


async def add_favorite(rc: RecipeContext, recipe_id: str) -> bool:
    meal: Optional[dict[str, Any]] = await rc.lookup(
        recipe_key(recipe_id), lambda c: c.lookup(recipe_id)
    )
    if not meal:
        raise NotFoundError(f"Recipe {recipe_id} not found")
    name = meal.get("strMeal", recipe_id)
    if await asyncio.to_thread(rc.favorites.add, meal):
        success(f"Added {name} to favorites.")
        return True
    info(f"{name} is already in favorites.")
    return False


async def remove_favorite(rc: RecipeContext, recipe_id: str) -> bool:
    if await asyncio.to_thread(rc.favorites.remove, recipe_id):
        success(f"Removed {recipe_id} from favorites.")
        return True
    info(f"Recipe {recipe_id} is not in favorites.")
    return False


@favorites_app.command("list")
def favorites_list(ctx: typer.Context) -> None:
    """List favorite recipes."""
    run_with_context(ctx, list_favorites)


@favorites_app.command("show")
def favorites_show(
    ctx: typer.Context,
    recipe_id: str = typer.Argument(help="Recipe id (idMeal)."),
) -> None:
    """Show a favorite recipe from the local file (no network)."""
    run_with_context(ctx, show_favorite, recipe_id)


@favorites_app.command("add")
def favorites_add(
    ctx: typer.Context,
    recipe_id: str = typer.Argument(help="Recipe id (idMeal)."),
) -> None:
    """Add a recipe to favorites."""
    run_with_context(ctx, add_favorite, recipe_id)


@favorites_app.command("remove")
def favorites_remove(
    ctx: typer.Context,
    recipe_id: str = typer.Argument(help="Recipe id (idMeal)."),
) -> None:
    """Remove a recipe from favorites."""
    run_with_context(ctx, remove_favorite, recipe_id)
