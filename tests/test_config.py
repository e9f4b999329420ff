"""Tests for recipecli.config -- XDG paths, global config, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from recipecli.config import (
    ENV_API_URL,
    ENV_CACHE_PATH,
    ENV_CACHE_TTL,
    ENV_FAVORITES_PATH,
    default_cache_path,
    default_favorites_path,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    load_global_config,
    resolve_config,
    save_global_config,
)
from recipecli.exceptions import ConfigError
from recipecli.models import DEFAULT_TTL_SECONDS, GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "recipecli"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "recipecli"

    def test_cache_dir_not_created(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_cache_dir()
        assert result == tmp_path / ".cache" / "recipecli"
        assert not result.exists()

    def test_data_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        assert get_data_dir() == custom / "recipecli"
        assert default_favorites_path() == custom / "recipecli" / "favorites.json"


class TestXDGPathsFallback:
    """Fallback paths on non-XDG platforms (macOS, Windows)."""

    @pytest.fixture(autouse=True)
    def _non_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("recipecli.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

    def test_config_dir_fallback(self, tmp_path: Path) -> None:
        assert get_config_dir() == tmp_path / ".recipecli"

    def test_cache_path_fallback(self, tmp_path: Path) -> None:
        assert default_cache_path() == tmp_path / ".recipecli" / "cache" / "cache.json"

    def test_data_dir_fallback(self, tmp_path: Path) -> None:
        assert get_data_dir() == tmp_path / ".recipecli" / "data"


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.cache.ttl_seconds == DEFAULT_TTL_SECONDS

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        config = GlobalConfig()
        config.cache.ttl_seconds = 60
        config.api.max_retries = 0
        save_global_config(config)

        loaded = load_global_config()
        assert loaded.cache.ttl_seconds == 60
        assert loaded.api.max_retries == 0

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{broken")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"cache": {"ttl_seconds": -5}})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults_fill_paths(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.cache.path == str(isolated_config / "cache" / "recipecli" / "cache.json")
        assert config.favorites.path == str(
            isolated_config / "data" / "recipecli" / "favorites.json"
        )

    def test_global_file_values(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"cache": {"ttl_seconds": 120}})
        assert resolve_config().cache.ttl_seconds == 120

    def test_env_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(get_config_dir() / "config.json", {"cache": {"ttl_seconds": 120}})
        monkeypatch.setenv(ENV_CACHE_TTL, "30")
        monkeypatch.setenv(ENV_CACHE_PATH, "/tmp/env-cache.json")
        monkeypatch.setenv(ENV_FAVORITES_PATH, "/tmp/env-favs.json")
        monkeypatch.setenv(ENV_API_URL, "http://localhost:9999/api")

        config = resolve_config()
        assert config.cache.ttl_seconds == 30
        assert config.cache.path == "/tmp/env-cache.json"
        assert config.favorites.path == "/tmp/env-favs.json"
        assert config.api.base_url == "http://localhost:9999/api"

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_CACHE_TTL, "30")
        monkeypatch.setenv(ENV_CACHE_PATH, "/tmp/env-cache.json")

        config = resolve_config(cli_cache_path="/tmp/cli-cache.json", cli_ttl_seconds=5)
        assert config.cache.ttl_seconds == 5
        assert config.cache.path == "/tmp/cli-cache.json"

    @pytest.mark.parametrize("value", ["soon", "0", "-10", "inf", "nan"])
    def test_bad_env_ttl(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv(ENV_CACHE_TTL, value)
        with pytest.raises(ConfigError, match=ENV_CACHE_TTL):
            resolve_config()

    def test_bad_cli_ttl(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="--ttl"):
            resolve_config(cli_ttl_seconds=0)

    def test_infinite_cli_ttl(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="finite"):
            resolve_config(cli_ttl_seconds=float("inf"))

    def test_infinite_ttl_in_file(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text('{"cache": {"ttl_seconds": Infinity}}')
        with pytest.raises(ConfigError):
            load_global_config()

    def test_does_not_persist_overrides(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_CACHE_TTL, "30")
        resolve_config()
        assert load_global_config().cache.ttl_seconds == DEFAULT_TTL_SECONDS
