"""Config commands -- view and modify the global configuration file.

Settings live in the recipecli config directory and provide defaults for
the API endpoint, cache TTL and location, favorites location and output
format.  Environment variables and root CLI options override them at run
time; see :func:`~recipecli.config.resolve_config`.
"""

from __future__ import annotations

import typer

from recipecli.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False, "--effective", help="Show values after env/CLI overrides and defaults."
    ),
) -> None:
    """Show the stored (or effective) configuration.

    Example::

        recipecli config show
        recipecli --json config show --effective
    """
    from recipecli.config import get_config_dir, load_global_config, resolve_config

    config = resolve_config() if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key in dot notation, e.g. 'cache.ttl_seconds'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the current field's type (bool, int, float or
    string; ``none`` clears an optional path) and the result is validated
    before saving.

    Example::

        recipecli config set cache.ttl_seconds 3600
        recipecli config set api.max_retries 0
        recipecli config set favorites.path ~/recipes/favorites.json
    """
    from recipecli.config import load_global_config, save_global_config
    from recipecli.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, (int, float)):
        try:
            coerced = type(current)(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    elif value.lower() == "none" and (current is None or final_key == "path"):
        coerced = None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults."""
    from recipecli.config import save_global_config
    from recipecli.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
