"""Tests for the async TheMealDB client, using httpx.MockTransport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from recipecli.client import MealDBClient, normalize_letters
from recipecli.exceptions import ApiError, ConnectionError_, InvalidUsageError, NotFoundError
from recipecli.models import ApiConfig


@pytest.fixture(autouse=True)
def _instant_backoff(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record retry delays instead of sleeping."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("recipecli.client.mealdb.asyncio.sleep", _sleep)
    return delays


def _client(handler, **config) -> MealDBClient:
    return MealDBClient(ApiConfig(**config), transport=httpx.MockTransport(handler))


class TestEndpoints:
    @pytest.mark.asyncio
    async def test_search_by_name(self, arrabiata: dict) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"meals": [arrabiata]})

        async with _client(handler) as client:
            meals = await client.search_by_name("arrabiata")

        assert meals == [arrabiata]
        assert seen[0].url.path == "/api/json/v1/1/search.php"
        assert seen[0].url.params["s"] == "arrabiata"

    @pytest.mark.asyncio
    async def test_null_meals_is_empty_list(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"meals": None})) as client:
            assert await client.search_by_name("zzz") == []
            assert await client.lookup("0") is None

    @pytest.mark.asyncio
    async def test_lookup_returns_first(self, arrabiata: dict) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["i"] == "52771"
            return httpx.Response(200, json={"meals": [arrabiata]})

        async with _client(handler) as client:
            assert await client.lookup("52771") == arrabiata

    @pytest.mark.asyncio
    async def test_filters(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            params = dict(request.url.params)
            return httpx.Response(200, json={"meals": [{"idMeal": "1", "strMeal": str(params)}]})

        async with _client(handler) as client:
            by_ingredient = await client.filter_by_ingredient("chicken_breast")
            by_category = await client.filter_by_category("Seafood")

        assert by_ingredient[0]["strMeal"] == str({"i": "chicken_breast"})
        assert by_category[0]["strMeal"] == str({"c": "Seafood"})

    @pytest.mark.asyncio
    async def test_first_letters_merges_and_dedups(self) -> None:
        pages = {
            "a": [{"idMeal": "1", "strMeal": "Apple Pie"}, {"idMeal": "2", "strMeal": "Apam"}],
            "b": [{"idMeal": "2", "strMeal": "Apam"}, {"idMeal": "3", "strMeal": "Bread"}],
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"meals": pages.get(request.url.params["f"])})

        async with _client(handler) as client:
            meals = await client.search_by_first_letters("abBz")

        assert [m["idMeal"] for m in meals] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_random_meal_returns_one_and_cancels_rest(self) -> None:
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls > 1:
                await asyncio.Event().wait()
            return httpx.Response(200, json={"meals": [{"idMeal": str(calls), "strMeal": "R"}]})

        async with _client(handler) as client:
            meal = await asyncio.wait_for(client.random_meal(attempts=3), timeout=5)

        assert meal == {"idMeal": "1", "strMeal": "R"}


class TestErrors:
    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        async with _client(lambda r: httpx.Response(404, text="nope")) as client:
            with pytest.raises(NotFoundError):
                await client.search_by_name("x")

    @pytest.mark.asyncio
    async def test_4xx_is_api_error(self) -> None:
        async with _client(lambda r: httpx.Response(429)) as client:
            with pytest.raises(ApiError, match="429"):
                await client.search_by_name("x")

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        async with _client(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ApiError, match="non-JSON"):
                await client.search_by_name("x")

    @pytest.mark.asyncio
    async def test_unexpected_meals_shape(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"meals": "oops"})) as client:
            with pytest.raises(ApiError):
                await client.search_by_name("x")

    @pytest.mark.asyncio
    async def test_5xx_retried_then_succeeds(self, _instant_backoff: list[float]) -> None:
        responses = iter([httpx.Response(503), httpx.Response(200, json={"meals": []})])

        async with _client(lambda r: next(responses), max_retries=2) as client:
            assert await client.search_by_name("x") == []
        assert _instant_backoff == [1]

    @pytest.mark.asyncio
    async def test_5xx_exhausts_retries(self, _instant_backoff: list[float]) -> None:
        async with _client(lambda r: httpx.Response(500), max_retries=2) as client:
            with pytest.raises(ApiError, match="500"):
                await client.search_by_name("x")
        assert _instant_backoff == [1, 2]

    @pytest.mark.asyncio
    async def test_network_error_becomes_connection_error(
        self, _instant_backoff: list[float]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler, max_retries=1) as client:
            with pytest.raises(ConnectionError_, match="2 attempts"):
                await client.search_by_name("x")
        assert _instant_backoff == [1]


class TestNormalizeLetters:
    def test_lowercases_dedups_and_caps(self) -> None:
        assert normalize_letters("AaBcD") == ["a", "b", "c"]

    def test_ignores_non_letters(self) -> None:
        assert normalize_letters("1 x-y") == ["x", "y"]

    def test_accepts_iterables(self) -> None:
        assert normalize_letters(["q", "Q"]) == ["q"]

    def test_requires_a_letter(self) -> None:
        with pytest.raises(InvalidUsageError):
            normalize_letters("123")
