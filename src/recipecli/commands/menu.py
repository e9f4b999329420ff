"""Interactive menu -- the classic "Recipe Explorer" loop.

Runs every lookup inside one event loop and one bootstrapped context, so
expired entries are evicted once per session.  Errors from a single
action are reported and the menu is shown again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from recipecli.commands import run_with_context
from recipecli.commands import favorites as favorites_cmd
from recipecli.commands import recipes
from recipecli.context import RecipeContext
from recipecli.exceptions import RecipeCliError
from recipecli.output import error, info

MENU_ITEMS = [
    "Search recipes",
    "View recipe details by ID",
    "Explore recipes by first letter",
    "Search by ingredient",
    "View favorites",
    "Discover random recipe",
    "Exit",
]
EXIT_CHOICE = len(MENU_ITEMS)


def _prompt_choice() -> int:
    while True:
        choice = typer.prompt(f"Enter your choice (1-{EXIT_CHOICE})", type=int)
        if 1 <= choice <= EXIT_CHOICE:
            return choice
        error(f"Please enter a number between 1 and {EXIT_CHOICE}")


def _pick(meals: list[dict[str, Any]]) -> Optional[str]:
    """Ask for a 1-based index into *meals*; ``None`` for 0 or out of range."""
    if not meals:
        return None
    index = typer.prompt("Enter recipe number to view details or 0 to cancel", type=int, default=0)
    if 1 <= index <= len(meals):
        return meals[index - 1].get("idMeal")
    return None


async def _details(rc: RecipeContext, recipe_id: str) -> None:
    meal = await recipes.show_recipe_details(rc, recipe_id, related=True)
    if await asyncio.to_thread(rc.favorites.is_favorite, recipe_id):
        if typer.confirm("This recipe is in your favorites. Remove it?", default=False):
            await favorites_cmd.remove_favorite(rc, recipe_id)
    elif typer.confirm("Add this recipe to your favorites?", default=False):
        await asyncio.to_thread(rc.favorites.add, meal)
        info("Added to favorites.")


async def _dispatch(rc: RecipeContext, choice: int) -> None:
    picked: Optional[str] = None
    if choice == 1:
        meals = await recipes.search_recipes(rc, typer.prompt("Enter search term"))
        picked = _pick(meals)
    elif choice == 2:
        picked = typer.prompt("Enter recipe ID")
    elif choice == 3:
        meals = await recipes.explore_letters(rc, typer.prompt("Enter up to 3 letters (e.g. abc)"))
        picked = _pick(meals)
    elif choice == 4:
        meals = await recipes.search_ingredient(rc, typer.prompt("Enter an ingredient"))
        picked = _pick(meals)
    elif choice == 5:
        meals = await favorites_cmd.list_favorites(rc)
        picked = _pick(meals)
    elif choice == 6:
        meal = await recipes.discover_random(rc)
        if meal and not await asyncio.to_thread(
            rc.favorites.is_favorite, meal.get("idMeal", "")
        ):
            if typer.confirm("Add this recipe to your favorites?", default=False):
                await asyncio.to_thread(rc.favorites.add, meal)
                info("Added to favorites.")
    if picked:
        await _details(rc, picked)


async def _menu(rc: RecipeContext) -> None:
    info("Welcome to Recipe Explorer!")
    while True:
        typer.echo("\n===== RECIPE EXPLORER =====")
        for number, label in enumerate(MENU_ITEMS, start=1):
            typer.echo(f"{number}. {label}")
        choice = _prompt_choice()
        if choice == EXIT_CHOICE:
            info("Thank you for using Recipe Explorer!")
            return
        try:
            await _dispatch(rc, choice)
        except RecipeCliError as exc:
            error(str(exc))


def menu_command(ctx: typer.Context) -> None:
    """Start the interactive recipe explorer."""
    run_with_context(ctx, _menu)
