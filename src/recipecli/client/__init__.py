"""HTTP client for TheMealDB.

:class:`MealDBClient` is an async context manager over
:class:`httpx.AsyncClient` with retry, backoff and error mapping.  Its
methods are what callers hand to
:meth:`~recipecli.cache.RecipeCache.get_or_fetch` as fetch functions.
"""

from recipecli.client.mealdb import MealDBClient, normalize_letters

__all__ = ["MealDBClient", "normalize_letters"]
