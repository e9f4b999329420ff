"""Recipe lookup commands -- search, show, letters, ingredient, random.

Every lookup except ``random`` goes through
:meth:`~recipecli.context.RecipeContext.lookup`, so repeated queries are
answered from the local cache for a day and keep working from stale
copies while TheMealDB is unreachable.  ``--refresh`` forces a fetch.

The action coroutines (``search_recipes``, ``show_recipe_details`` and
friends) take a bootstrapped context and are shared with the interactive
menu.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from recipecli.client import normalize_letters
from recipecli.commands import run_with_context
from recipecli.context import RecipeContext
from recipecli.exceptions import InvalidUsageError, NotFoundError
from recipecli.formatting import show_recipe, show_recipe_list
from recipecli.output import info, progress, success

Meals = list[dict[str, Any]]


# ------------------------------------------------------------------ #
# Cache keys
# ------------------------------------------------------------------ #


def search_key(query: str) -> str:
    return f"search_{query.strip().lower()}"


def recipe_key(recipe_id: str) -> str:
    return f"recipe_{recipe_id.strip()}"


def letters_key(letters: list[str]) -> str:
    return "letters_" + "".join(sorted(letters))


def ingredient_key(ingredient: str) -> str:
    return f"ingredient_{ingredient.strip().lower()}"


def category_key(category: str) -> str:
    return f"category_{category.strip().lower()}"


# ------------------------------------------------------------------ #
# Actions
# ------------------------------------------------------------------ #


async def search_recipes(rc: RecipeContext, query: str, refresh: bool = False) -> Meals:
    query = query.strip()
    if not query:
        raise InvalidUsageError("Search term cannot be empty")
    progress(f'Searching for "{query}"...')
    meals = await rc.lookup(search_key(query), lambda c: c.search_by_name(query), refresh)
    show_recipe_list(meals, title=f'Recipes matching "{query}"')
    return meals


async def show_recipe_details(
    rc: RecipeContext,
    recipe_id: str,
    refresh: bool = False,
    related: bool = False,
    favorite: Optional[bool] = None,
) -> dict[str, Any]:
    recipe_id = recipe_id.strip()
    if not recipe_id:
        raise InvalidUsageError("Recipe ID cannot be empty")
    progress(f"Fetching details for recipe {recipe_id}...")
    meal = await rc.lookup(recipe_key(recipe_id), lambda c: c.lookup(recipe_id), refresh)
    if not meal:
        raise NotFoundError(f"Recipe {recipe_id} not found")
    show_recipe(meal)

    if favorite is True:
        if await asyncio.to_thread(rc.favorites.add, meal):
            success(f"Added {meal.get('strMeal', recipe_id)} to favorites.")
        else:
            info("Already in favorites.")
    elif favorite is False:
        if await asyncio.to_thread(rc.favorites.remove, recipe_id):
            success(f"Removed {meal.get('strMeal', recipe_id)} from favorites.")
        else:
            info("Not in favorites.")
    elif await asyncio.to_thread(rc.favorites.is_favorite, recipe_id):
        info("This recipe is in your favorites.")

    category = meal.get("strCategory")
    if related and category:
        others = await rc.lookup(
            category_key(category), lambda c: c.filter_by_category(category), refresh
        )
        others = [m for m in others if m.get("idMeal") != recipe_id]
        show_recipe_list(others, title=f"Related recipes ({category})")
    return meal


async def explore_letters(rc: RecipeContext, letters: str, refresh: bool = False) -> Meals:
    unique = normalize_letters(letters)
    progress(f"Searching for recipes starting with: {', '.join(unique)}...")
    meals = await rc.lookup(
        letters_key(unique), lambda c: c.search_by_first_letters(unique), refresh
    )
    show_recipe_list(meals, title=f"Recipes starting with {', '.join(unique)}")
    return meals


async def search_ingredient(rc: RecipeContext, ingredient: str, refresh: bool = False) -> Meals:
    ingredient = ingredient.strip()
    if not ingredient:
        raise InvalidUsageError("Ingredient cannot be empty")
    progress(f"Searching for recipes with {ingredient}...")
    meals = await rc.lookup(
        ingredient_key(ingredient), lambda c: c.filter_by_ingredient(ingredient), refresh
    )
    show_recipe_list(meals, title=f"Recipes with {ingredient}")
    return meals


async def discover_random(rc: RecipeContext) -> Optional[dict[str, Any]]:
    progress("Fetching random recipes...")
    async with rc.client() as client:
        meal = await client.random_meal()
    if not meal:
        info("No random recipe found.")
        return None
    show_recipe(meal)
    if await asyncio.to_thread(rc.favorites.is_favorite, meal.get("idMeal", "")):
        info("This recipe is in your favorites.")
    return meal


# ------------------------------------------------------------------ #
# Typer commands
# ------------------------------------------------------------------ #

_REFRESH = typer.Option(False, "--refresh", "-r", help="Ignore the cache and fetch again.")


def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(help="Part of the recipe name."),
    refresh: bool = _REFRESH,
) -> None:
    """Search recipes by name.

    Example::

        recipecli search arrabiata
        recipecli --json search chicken
    """
    run_with_context(ctx, search_recipes, query, refresh)


def show_command(
    ctx: typer.Context,
    recipe_id: str = typer.Argument(help="TheMealDB recipe id (idMeal)."),
    refresh: bool = _REFRESH,
    related: bool = typer.Option(
        False, "--related", help="Also list other recipes in the same category."
    ),
    favorite: Optional[bool] = typer.Option(
        None, "--favorite/--unfavorite", help="Add to or remove from favorites."
    ),
) -> None:
    """Show a recipe's ingredients and instructions.

    Example::

        recipecli show 52771 --related
        recipecli show 52771 --favorite
    """
    run_with_context(ctx, show_recipe_details, recipe_id, refresh, related, favorite)


def letters_command(
    ctx: typer.Context,
    letters: str = typer.Argument(help="Up to three first letters, e.g. 'abc'."),
    refresh: bool = _REFRESH,
) -> None:
    """Explore recipes by first letter."""
    run_with_context(ctx, explore_letters, letters, refresh)


def ingredient_command(
    ctx: typer.Context,
    ingredient: str = typer.Argument(help="Main ingredient, e.g. 'chicken_breast'."),
    refresh: bool = _REFRESH,
) -> None:
    """Find recipes that use an ingredient."""
    run_with_context(ctx, search_ingredient, ingredient, refresh)


def random_command(ctx: typer.Context) -> None:
    """Discover a random recipe (never cached)."""
    run_with_context(ctx, discover_random)
