"""Numeric process exit codes used by the ``tinycache`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~tinycache.exceptions.TinyCacheError` subclass, so
shell scripts can branch on the failure class without parsing stderr.

Example::

    $ tinycache age some-key
    $ echo $?
    4   # EXIT_NOT_FOUND -- no entry stored under that key
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or configuration values."""

EXIT_NOT_FOUND = 4
"""No cache entry exists for the requested key."""

EXIT_IO_ERROR = 5
"""A filesystem operation on the cache directory failed."""

EXIT_SERIALIZATION_ERROR = 6
"""A stored value could not be encoded or decoded."""

EXIT_TIME_ERROR = 7
"""An entry's age could not be computed (modification time in the future)."""
