"""recipecli -- Explore TheMealDB recipes from the terminal.

Search recipes by name, first letter or ingredient, view full recipes and
keep a list of favorites.  API responses are cached on disk for a day and
served from the stale copy when the network is unavailable.

Typical workflow::

    recipecli search arrabiata
    recipecli show 52771 --favorite
    recipecli favorites list

Modules:
    app: Typer application and CLI entry point.
    cache: TTL-bounded, file-backed response cache.
    client: Async TheMealDB HTTP client.
    config: XDG-aware configuration resolution.
    favorites: Persistent favorites list.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
