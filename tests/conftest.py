"""Shared test fixtures for recipecli.

Provides isolated config environments, a controllable clock for the
cache, canned TheMealDB payloads, an httpx mock transport wired into the
CLI, and a CLI runner.  These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from recipecli.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``recipecli`` logger after every test.

    Both cache references to sys.stdout/sys.stderr at creation time.  When
    Typer's CliRunner redirects those streams and the test finishes, the
    cached references point at closed files.
    """
    yield
    reset_output()
    logger = logging.getLogger("recipecli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config.  Clears all RECIPECLI_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: True)

    for var in [
        "RECIPECLI_API_URL",
        "RECIPECLI_CACHE_PATH",
        "RECIPECLI_CACHE_TTL",
        "RECIPECLI_FAVORITES_PATH",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# TheMealDB payloads
# ---------------------------------------------------------------------------


def make_meal(meal_id: str, name: str, **extra: Any) -> dict[str, Any]:
    """A TheMealDB ``meal`` object with the fields the CLI reads."""
    meal = {
        "idMeal": meal_id,
        "strMeal": name,
        "strCategory": "Vegetarian",
        "strArea": "Italian",
        "strInstructions": "Bring a large pot of water to a boil.",
        "strMealThumb": f"https://www.themealdb.com/images/media/meals/{meal_id}.jpg",
        "strTags": "Pasta,Curry",
        "strYoutube": "https://www.youtube.com/watch?v=1IszT_guI08",
        "strSource": None,
        "strIngredient1": "penne rigate",
        "strMeasure1": "1 pound",
        "strIngredient2": "olive oil",
        "strMeasure2": "1/4 cup",
        "strIngredient3": "",
        "strMeasure3": " ",
    }
    meal.update(extra)
    return meal


@pytest.fixture
def arrabiata() -> dict[str, Any]:
    return make_meal("52771", "Spicy Arrabiata Penne")


# ---------------------------------------------------------------------------
# HTTP mocking
# ---------------------------------------------------------------------------


class MockMealDB:
    """Routes TheMealDB requests to canned responses and records every call.

    ``routes`` maps ``(endpoint, param, value)`` to a JSON payload, an
    ``httpx.Response`` or an exception to raise; an empty *param* matches
    any query.  Unrouted requests answer
    ``{"meals": null}``.  Set ``offline`` to make every request fail with
    :class:`httpx.ConnectError`.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str, str], Any] = {}
        self.requests: list[httpx.Request] = []
        self.offline = False

    def route(self, endpoint: str, param: str, value: str, response: Any) -> None:
        self.routes[(endpoint, param, value)] = response

    def calls(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(endpoint)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        for (route_endpoint, param, value), response in self.routes.items():
            if route_endpoint != endpoint:
                continue
            if not param or request.url.params.get(param) == value:
                if isinstance(response, Exception):
                    raise response
                if isinstance(response, httpx.Response):
                    return response
                return httpx.Response(200, json=response)
        return httpx.Response(200, json={"meals": None})


@pytest.fixture
def mealdb(monkeypatch: pytest.MonkeyPatch) -> MockMealDB:
    """Install a :class:`MockMealDB` as the transport for every CLI request.

    Retries are made instant so offline tests do not sleep.
    """
    mock = MockMealDB()
    monkeypatch.setattr("recipecli.context._transport", httpx.MockTransport(mock))

    async def _no_sleep(delay: float) -> None:
        return None

    monkeypatch.setattr("recipecli.client.mealdb.asyncio.sleep", _no_sleep)
    return mock


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, isolated_config: Path) -> Callable[..., Any]:
    """Invoke the root app with ``--plain`` prepended unless a format flag is given."""
    from recipecli.app import app

    def _run(*args: str, input: str | None = None) -> Any:
        argv = list(args)
        if "--json" not in argv:
            argv.insert(0, "--plain")
        return cli_runner.invoke(app, argv, input=input)

    return _run
