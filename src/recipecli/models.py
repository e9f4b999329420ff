"""Canonical Pydantic models shared across recipecli modules.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ApiConfig`, :class:`CacheConfig`, :class:`FavoritesConfig`,
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Cache models** -- the on-disk shape of cache entries and the summary
returned by :meth:`~recipecli.cache.RecipeCache.stats`:
    :class:`CacheEntry` and :class:`CacheStats`.

**Recipe models** -- a typed view over TheMealDB ``meal`` objects used by
the formatter:
    :class:`Ingredient` and :class:`Recipe`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TTL_SECONDS = 24 * 60 * 60.0

# TheMealDB spreads ingredients over strIngredient1..20 / strMeasure1..20.
MAX_INGREDIENTS = 20


# --- Configuration ---


class ApiConfig(BaseModel):
    """Settings for the recipe API client."""

    base_url: str = Field(default=DEFAULT_API_URL, description="TheMealDB API root")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, description="Retries on 5xx / network errors")


class CacheConfig(BaseModel):
    """Local response cache settings."""

    ttl_seconds: float = Field(
        default=DEFAULT_TTL_SECONDS,
        gt=0,
        allow_inf_nan=False,
        description="Staleness window in seconds",
    )
    path: Optional[str] = Field(
        default=None, description="Cache file location (default: <cache dir>/cache.json)"
    )


class FavoritesConfig(BaseModel):
    """Where the favorites list lives."""

    path: Optional[str] = Field(
        default=None, description="Favorites file (default: <data dir>/favorites.json)"
    )


class OutputConfig(BaseModel):
    """Default output format preference."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/recipecli/config.json``.

    Loaded and saved by :func:`~recipecli.config.load_global_config` and
    :func:`~recipecli.config.save_global_config`.  Values here are
    overridden by environment variables and CLI flags; see
    :func:`~recipecli.config.resolve_config`.
    """

    api: ApiConfig = Field(default_factory=ApiConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    favorites: FavoritesConfig = Field(default_factory=FavoritesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Cache ---


class CacheEntry(BaseModel):
    """One cached value with the instant it was written.

    Serialised as ``{"timestamp": <ms since epoch>, "data": <value>}`` so
    the file layout stays compatible with caches written by earlier
    versions of the tool.
    """

    model_config = ConfigDict(populate_by_name=True)

    stored_at: int = Field(alias="timestamp", description="Milliseconds since the epoch")
    value: Any = Field(default=None, alias="data")

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.stored_at

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        return self.age_ms(now_ms) < ttl_ms


class CacheStats(BaseModel):
    """Summary of the cache file contents at one instant."""

    path: str
    ttl_seconds: float
    entries: int = 0
    fresh: int = 0
    stale: int = 0
    oldest: Optional[int] = Field(default=None, description="Oldest stored_at (ms)")
    newest: Optional[int] = Field(default=None, description="Newest stored_at (ms)")


# --- Recipes ---


class Ingredient(BaseModel):
    name: str
    measure: str = ""


class Recipe(BaseModel):
    """Typed view of a TheMealDB ``meal`` object.

    Filter endpoints (by ingredient or category) return only ``idMeal``,
    ``strMeal`` and ``strMealThumb``; every other field is optional.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="idMeal")
    name: str = Field(alias="strMeal")
    category: Optional[str] = Field(default=None, alias="strCategory")
    area: Optional[str] = Field(default=None, alias="strArea")
    instructions: Optional[str] = Field(default=None, alias="strInstructions")
    thumbnail: Optional[str] = Field(default=None, alias="strMealThumb")
    tags: Optional[str] = Field(default=None, alias="strTags")
    youtube: Optional[str] = Field(default=None, alias="strYoutube")
    source: Optional[str] = Field(default=None, alias="strSource")
    ingredients: list[Ingredient] = Field(default_factory=list)

    @classmethod
    def from_meal(cls, meal: dict[str, Any]) -> Recipe:
        """Build a :class:`Recipe` from a raw API dict, collecting numbered ingredients."""
        ingredients = []
        for i in range(1, MAX_INGREDIENTS + 1):
            name = (meal.get(f"strIngredient{i}") or "").strip()
            if not name:
                continue
            measure = (meal.get(f"strMeasure{i}") or "").strip()
            ingredients.append(Ingredient(name=name, measure=measure))
        return cls.model_validate({**meal, "ingredients": ingredients})
