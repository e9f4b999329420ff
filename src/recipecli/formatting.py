"""Rendering of TheMealDB recipes for the terminal.

The pure functions (:func:`recipe_list_rows`, :func:`recipe_to_text`) turn
raw ``meal`` dicts into rows and text; :func:`show_recipe_list` and
:func:`show_recipe` send them through the active
:class:`~recipecli.output.OutputManager`.  In JSON mode the raw dicts are
printed unchanged so output can be piped into ``jq``.
"""

from __future__ import annotations

from typing import Any, Optional

from rich.panel import Panel
from rich.text import Text

from recipecli.models import Recipe
from recipecli.output import OutputFormat, get_output

LIST_HEADERS = ["#", "Name", "ID"]


def recipe_list_rows(meals: list[dict[str, Any]]) -> list[list[str]]:
    """Numbered ``[index, name, id]`` rows, starting at 1."""
    rows = []
    for index, meal in enumerate(meals, start=1):
        recipe = Recipe.from_meal(meal)
        rows.append([str(index), recipe.name, recipe.id])
    return rows


def recipe_to_text(meal: dict[str, Any]) -> str:
    """Multi-line plain-text description of a full recipe."""
    recipe = Recipe.from_meal(meal)
    lines = [f"{recipe.name} (ID: {recipe.id})"]
    meta = [part for part in (recipe.category, recipe.area) if part]
    if meta:
        lines.append(" | ".join(meta))
    if recipe.tags:
        lines.append(f"Tags: {recipe.tags}")

    if recipe.ingredients:
        lines.append("")
        lines.append("Ingredients:")
        for ingredient in recipe.ingredients:
            if ingredient.measure:
                lines.append(f"  - {ingredient.measure} {ingredient.name}")
            else:
                lines.append(f"  - {ingredient.name}")

    if recipe.instructions:
        lines.append("")
        lines.append("Instructions:")
        lines.append(recipe.instructions.strip())

    links = [link for link in (recipe.youtube, recipe.source) if link]
    if links:
        lines.append("")
        lines.extend(links)
    return "\n".join(lines)


def show_recipe_list(meals: list[dict[str, Any]], title: Optional[str] = None) -> None:
    """Print a numbered list of recipes, or a notice on stderr if it is empty."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(meals)
        return
    if not meals:
        output.info("No recipes found.")
        return
    output.print_table(LIST_HEADERS, recipe_list_rows(meals), title=title)


def show_recipe(meal: dict[str, Any]) -> None:
    """Print a single recipe in full."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(meal)
    elif output.format == OutputFormat.PLAIN:
        output.print_data(recipe_to_text(meal))
    else:
        recipe = Recipe.from_meal(meal)
        output.stdout.print(
            Panel(Text(recipe_to_text(meal)), title=Text(recipe.name), expand=False)
        )
