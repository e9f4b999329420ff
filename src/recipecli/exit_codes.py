"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to one error category and is referenced by the
corresponding :class:`~recipecli.exceptions.RecipeCliError` subclass, so
shell wrappers can tell a network outage from an empty cache without
parsing stderr.

Example::

    $ recipecli search arrabiata
    $ echo $?
    9   # EXIT_NO_DATA -- API unreachable and nothing cached for this search
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_FOUND = 4
"""The requested recipe does not exist."""

EXIT_API_ERROR = 5
"""The recipe API answered with an error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_STORAGE_UNAVAILABLE = 8
"""The cache or favorites file could not be created or written."""

EXIT_NO_DATA = 9
"""A lookup failed and no cached copy, fresh or stale, was available."""

EXIT_CANCELLED = 130
"""The user interrupted the command with Ctrl-C."""
