"""Typer application and CLI entry point for recipecli.

This module wires together the top-level Typer application and registers
the recipe commands (``search``, ``show``, ``letters``, ``ingredient``,
``random``, ``menu``) and the ``favorites``, ``cache`` and ``config``
sub-apps.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs signal handlers and invokes the Typer app.
:class:`~recipecli.exceptions.RecipeCliError` exits with the error's code;
anything else is written to a crash log under the data directory.

See Also:
    :mod:`recipecli.config`: Global configuration resolution.
    :mod:`recipecli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import typer

from recipecli import __version__
from recipecli.commands.cache import cache_app
from recipecli.commands.config import config_app
from recipecli.commands.favorites import favorites_app
from recipecli.commands.menu import menu_command
from recipecli.commands.recipes import (
    ingredient_command,
    letters_command,
    random_command,
    search_command,
    show_command,
)
from recipecli.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from recipecli.output import OutputFormat


app = typer.Typer(
    name="recipecli",
    help="Search, view and save recipes from TheMealDB.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("search")(search_command)
app.command("show")(show_command)
app.command("letters")(letters_command)
app.command("ingredient")(ingredient_command)
app.command("random")(random_command)
app.command("menu")(menu_command)
app.add_typer(favorites_app, name="favorites", help="Manage favorite recipes.")
app.add_typer(cache_app, name="cache", help="Inspect and maintain the response cache.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"recipecli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    cache_path: Optional[str] = typer.Option(
        None, "--cache-path", help="Cache file location for this run."
    ),
    ttl: Optional[float] = typer.Option(
        None, "--ttl", help="Cache freshness window in seconds for this run."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~recipecli.output.OutputManager` and
    logging from CLI flags, and stores the cache overrides in ``ctx.obj``
    for :func:`~recipecli.commands.settings`.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        cache_path: Cache file override (highest precedence).
        ttl: TTL override in seconds (highest precedence).
    """
    from recipecli.output import OutputFormat, OutputManager, configure_logging, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose=verbose, quiet=quiet, no_color=no_color)

    ctx.ensure_object(dict)
    ctx.obj["cache_path"] = cache_path
    ctx.obj["ttl"] = ttl


def _configured_format() -> OutputFormat:
    """Output format from the global config; ``AUTO`` if unset or unreadable."""
    from recipecli.config import load_global_config
    from recipecli.exceptions import ConfigError
    from recipecli.output import OutputFormat

    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        # Commands that need the config report the problem themselves.
        return OutputFormat.AUTO


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from recipecli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``recipecli`` console script.

    Unhandled :class:`~recipecli.exceptions.RecipeCliError` instances
    cause a clean exit with the error's ``exit_code``.  All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from recipecli.exceptions import RecipeCliError
        from recipecli.output import error

        if isinstance(exc, RecipeCliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
