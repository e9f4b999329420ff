"""Exception hierarchy for recipecli.

All exceptions inherit from :class:`RecipeCliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`recipecli.exit_codes`.
:func:`recipecli.app.main` catches ``RecipeCliError`` and exits with that
code; anything else produces a crash log.

Subclass hierarchy::

    RecipeCliError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- ApiError            (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- StorageUnavailable  (exit 8)
    +-- CorruptState        (exit 1, never surfaced by cache reads)
    +-- NoDataAvailable     (exit 9)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from recipecli.exit_codes import (
    EXIT_API_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NO_DATA,
    EXIT_NOT_FOUND,
    EXIT_STORAGE_UNAVAILABLE,
)


class RecipeCliError(Exception):
    """Base exception for all recipecli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RecipeCliError):
    """Raised for invalid CLI input such as an empty search term."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(RecipeCliError):
    """Raised when the API returns HTTP 404 or a recipe id does not exist."""

    exit_code = EXIT_NOT_FOUND


class ApiError(RecipeCliError):
    """Raised when the recipe API answers with an HTTP error status."""

    exit_code = EXIT_API_ERROR


class ConnectionError_(RecipeCliError):
    """Raised on network-level failures after all retries are spent.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class StorageUnavailable(RecipeCliError):
    """The backing file or its directory cannot be created or written.

    Fatal when raised from
    :meth:`~recipecli.storage.JsonDocumentStore.ensure_initialized`: the
    cache cannot function without its medium.
    """

    exit_code = EXIT_STORAGE_UNAVAILABLE


class CorruptState(RecipeCliError):
    """The backing file exists but does not hold the expected JSON container.

    Only :meth:`~recipecli.storage.JsonDocumentStore.read` raises this.
    Tolerant readers treat it as an empty document, and the next save
    overwrites the bad content.
    """


class NoDataAvailable(RecipeCliError):
    """A fetch failed and nothing, fresh or stale, is cached for the key.

    The original fetch error is chained as ``__cause__`` and also kept on
    :attr:`fetch_error`.

    Args:
        key: The cache key that could not be served.
        fetch_error: The exception raised by the fetch function.
    """

    exit_code = EXIT_NO_DATA

    def __init__(self, key: str, fetch_error: BaseException | None = None):
        detail = f": {fetch_error}" if fetch_error is not None else ""
        super().__init__(f"Failed to fetch '{key}' and no cached copy is available{detail}")
        self.key = key
        self.fetch_error = fetch_error


class ConfigError(RecipeCliError):
    """Raised for configuration problems (invalid JSON, failed validation, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
