"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.recipecli/`` on macOS and Windows.  See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.  Only the config directory
  is created eagerly; the cache and favorites stores create their own
  directories so that failures surface as
  :class:`~recipecli.exceptions.StorageUnavailable`.
* **Global config** -- a single :class:`~recipecli.models.GlobalConfig`
  JSON file, written with :func:`~recipecli.storage.atomic_write`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the global config file.
"""

from __future__ import annotations

import json
import math
import os
import platform
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from recipecli.exceptions import ConfigError
from recipecli.models import GlobalConfig
from recipecli.storage import atomic_write

_APP_NAME = "recipecli"
_CONFIG_FILENAME = "config.json"
_CACHE_FILENAME = "cache.json"
_FAVORITES_FILENAME = "favorites.json"

ENV_API_URL = "RECIPECLI_API_URL"
ENV_CACHE_PATH = "RECIPECLI_CACHE_PATH"
ENV_CACHE_TTL = "RECIPECLI_CACHE_TTL"
ENV_FAVORITES_PATH = "RECIPECLI_FAVORITES_PATH"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/recipecli/`` (default ``~/.config/recipecli/``).
    On macOS/Windows: ``~/.recipecli/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory (not created here).

    On Linux/BSD: ``$XDG_CACHE_HOME/recipecli/`` (default ``~/.cache/recipecli/``).
    On macOS/Windows: ``~/.recipecli/cache/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    return _fallback_base_dir() / "cache"


def get_data_dir() -> Path:
    """Return the data directory for favorites and crash logs (not created here).

    On Linux/BSD: ``$XDG_DATA_HOME/recipecli/`` (default ``~/.local/share/recipecli/``).
    On macOS/Windows: ``~/.recipecli/data/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    return _fallback_base_dir() / "data"


def default_cache_path() -> Path:
    return get_cache_dir() / _CACHE_FILENAME


def default_favorites_path() -> Path:
    return get_data_dir() / _FAVORITES_FILENAME


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~recipecli.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_cache_path: Optional[str] = None,
    cli_ttl_seconds: Optional[float] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``--cache-path``, ``--ttl``)
        2. Environment variables (``RECIPECLI_API_URL``,
           ``RECIPECLI_CACHE_PATH``, ``RECIPECLI_CACHE_TTL``,
           ``RECIPECLI_FAVORITES_PATH``)
        3. User config (``~/.config/recipecli/config.json``)
        4. Defaults

    Unset paths are filled in with :func:`default_cache_path` and
    :func:`default_favorites_path` so callers always get concrete locations.

    Raises:
        ConfigError: If the config file or an environment value is invalid.
    """
    cfg = load_global_config()

    env_api_url = os.environ.get(ENV_API_URL)
    if env_api_url:
        cfg.api.base_url = env_api_url

    env_cache_path = os.environ.get(ENV_CACHE_PATH)
    if env_cache_path:
        cfg.cache.path = env_cache_path

    env_ttl = os.environ.get(ENV_CACHE_TTL)
    if env_ttl:
        cfg.cache.ttl_seconds = _parse_ttl(env_ttl, source=ENV_CACHE_TTL)

    env_favorites = os.environ.get(ENV_FAVORITES_PATH)
    if env_favorites:
        cfg.favorites.path = env_favorites

    if cli_cache_path is not None:
        cfg.cache.path = cli_cache_path
    if cli_ttl_seconds is not None:
        cfg.cache.ttl_seconds = _parse_ttl(str(cli_ttl_seconds), source="--ttl")

    if cfg.cache.path is None:
        cfg.cache.path = str(default_cache_path())
    if cfg.favorites.path is None:
        cfg.favorites.path = str(default_favorites_path())

    try:
        return GlobalConfig.model_validate(cfg.model_dump())
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _parse_ttl(value: str, source: str) -> float:
    try:
        ttl = float(value)
    except ValueError:
        raise ConfigError(f"{source} must be a number of seconds, got: {value}") from None
    if not math.isfinite(ttl) or ttl <= 0:
        raise ConfigError(f"{source} must be a positive finite number, got: {value}")
    return ttl
