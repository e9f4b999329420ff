"""Favorite recipes kept as a JSON array of TheMealDB ``meal`` objects.

Stored in ``~/.local/share/recipecli/favorites.json`` (XDG) or the
platform equivalent.  Entries are identified by their ``idMeal`` field and
never expire.  Reads are tolerant: a missing or corrupt file is an empty
list, and the next write replaces it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from recipecli.storage import JsonDocumentStore


class FavoritesStore:
    """Read/write the favorites list.

    Args:
        path: Location of the favorites JSON file.

    Example::

        favorites = FavoritesStore(Path("favorites.json"))
        favorites.ensure_initialized()
        favorites.add({"idMeal": "52771", "strMeal": "Spicy Arrabiata Penne"})
        assert favorites.is_favorite("52771")
    """

    def __init__(self, path: str | Path) -> None:
        self._store = JsonDocumentStore(path, container=list)

    @property
    def path(self) -> Path:
        return self._store.path

    def ensure_initialized(self) -> None:
        """Create the favorites file as ``[]`` if needed.

        Raises:
            StorageUnavailable: If the file cannot be created.
        """
        self._store.ensure_initialized()

    def entries(self) -> list[dict[str, Any]]:
        """Return all favorites in the order they were added."""
        return [item for item in self._store.load() if isinstance(item, dict)]

    def get(self, recipe_id: str) -> Optional[dict[str, Any]]:
        """Return the stored recipe with *recipe_id*, or ``None``."""
        for item in self.entries():
            if item.get("idMeal") == recipe_id:
                return item
        return None

    def is_favorite(self, recipe_id: str) -> bool:
        return self.get(recipe_id) is not None

    def add(self, recipe: dict[str, Any]) -> bool:
        """Append *recipe* unless one with the same ``idMeal`` is already stored.

        Returns:
            ``True`` if the recipe was added, ``False`` if it was already there.

        Raises:
            ValueError: If *recipe* has no ``idMeal``.
            StorageUnavailable: If the file cannot be written.
        """
        recipe_id = recipe.get("idMeal")
        if not recipe_id:
            raise ValueError("recipe has no idMeal")
        self._store.ensure_initialized()
        favorites = self.entries()
        if any(item.get("idMeal") == recipe_id for item in favorites):
            return False
        favorites.append(recipe)
        self._store.save(favorites)
        return True

    def remove(self, recipe_id: str) -> bool:
        """Remove the recipe with *recipe_id*.

        Returns:
            ``True`` if something was removed, ``False`` if it was not a favorite.
        """
        self._store.ensure_initialized()
        favorites = self.entries()
        remaining = [item for item in favorites if item.get("idMeal") != recipe_id]
        if len(remaining) == len(favorites):
            return False
        self._store.save(remaining)
        return True
