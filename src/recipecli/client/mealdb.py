"""Asynchronous TheMealDB client.

:class:`MealDBClient` wraps :class:`httpx.AsyncClient` with retry and
exponential backoff for 5xx responses and network errors, and maps
failures onto the :mod:`recipecli.exceptions` hierarchy.  Every method
returns plain JSON-compatible dicts so results can be cached verbatim.

TheMealDB answers "nothing found" with ``{"meals": null}``; the client
turns that into an empty list (or ``None`` for single lookups).
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any, Optional

import httpx

from recipecli.exceptions import ApiError, ConnectionError_, InvalidUsageError, NotFoundError
from recipecli.models import ApiConfig
from recipecli.output import get_output

MAX_LETTERS = 3


class MealDBClient:
    """Non-blocking client for the TheMealDB JSON API.

    Must be used as an async context manager.

    Args:
        config: Base URL, timeout and retry settings.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        async with MealDBClient(ApiConfig()) as client:
            meals = await client.search_by_name("arrabiata")
    """

    def __init__(
        self,
        config: ApiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> MealDBClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url.rstrip("/") + "/",
            timeout=self._config.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    async def search_by_name(self, query: str) -> list[dict[str, Any]]:
        """Full recipes whose name contains *query*."""
        return await self._meals("search.php", {"s": query})

    async def lookup(self, recipe_id: str) -> Optional[dict[str, Any]]:
        """The full recipe with *recipe_id*, or ``None`` if it does not exist."""
        meals = await self._meals("lookup.php", {"i": recipe_id})
        return meals[0] if meals else None

    async def search_by_first_letters(self, letters: Iterable[str]) -> list[dict[str, Any]]:
        """Recipes starting with any of up to three letters.

        The letters are queried concurrently.  Results are merged in letter
        order with duplicates (by ``idMeal``) dropped.

        Raises:
            InvalidUsageError: If no usable letter is given.
        """
        unique = normalize_letters(letters)
        batches = await asyncio.gather(
            *(self._meals("search.php", {"f": letter}) for letter in unique)
        )
        merged: list[dict[str, Any]] = []
        seen: set[str] = set()
        for batch in batches:
            for meal in batch:
                meal_id = meal.get("idMeal")
                if meal_id in seen:
                    continue
                seen.add(meal_id)
                merged.append(meal)
        return merged

    async def filter_by_ingredient(self, ingredient: str) -> list[dict[str, Any]]:
        """Summary recipes (id, name, thumbnail) that use *ingredient*."""
        return await self._meals("filter.php", {"i": ingredient})

    async def filter_by_category(self, category: str) -> list[dict[str, Any]]:
        """Summary recipes in *category*; used for "related recipes"."""
        return await self._meals("filter.php", {"c": category})

    async def random_meal(self, attempts: int = 3) -> Optional[dict[str, Any]]:
        """Request several random recipes at once and keep the first to arrive.

        The slower requests are cancelled.  If the first request to finish
        failed, its exception is raised.
        """
        tasks = [
            asyncio.create_task(self._meals("random.php", {}))
            for _ in range(max(1, attempts))
        ]
        try:
            done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        meals = next(iter(done)).result()
        return meals[0] if meals else None

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _meals(self, endpoint: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = await self._get_with_retry(endpoint, params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"{endpoint} returned a non-JSON body") from exc
        meals = payload.get("meals") if isinstance(payload, dict) else None
        if meals is None:
            return []
        if not isinstance(meals, list):
            raise ApiError(f"{endpoint} returned unexpected 'meals': {type(meals).__name__}")
        return meals

    async def _get_with_retry(self, endpoint: str, params: dict[str, str]) -> httpx.Response:
        """GET *endpoint*, retrying 5xx and network errors with exponential backoff.

        Delays double each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.get(endpoint, params=params)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            self._map_response_error(response)
            return response

        raise ApiError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = response.text[:200] if response.text else ""
        msg = f"HTTP {status}: {detail}" if detail else f"HTTP {status}"
        if status == 404:
            raise NotFoundError(msg)
        raise ApiError(msg)


def normalize_letters(letters: Iterable[str]) -> list[str]:
    """Lower-case, de-duplicate and cap *letters* at three alphabetic characters.

    Raises:
        InvalidUsageError: If no alphabetic letter remains.
    """
    unique: list[str] = []
    for ch in "".join(letters).lower():
        if ch.isalpha() and ch not in unique:
            unique.append(ch)
    if not unique:
        raise InvalidUsageError("Please enter at least one letter")
    return unique[:MAX_LETTERS]
