"""Exception hierarchy for tinycache.

All exceptions inherit from :class:`TinyCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`tinycache.exit_codes`.
The storage layer (:mod:`tinycache.store`) raises the :class:`StoreError`
family; the cache facade (:class:`~tinycache.cache.TinyCache`) catches and
logs those so that a broken cache never fails the caller's computation.

Subclass hierarchy::

    TinyCacheError            (exit 1)
    +-- ConfigError           (exit 2)
    +-- EntryNotFoundError    (exit 4)
    +-- StoreError            (exit 1)
        +-- IOError_          (exit 5)
        +-- SerializationError(exit 6)
        +-- TimeError         (exit 7)
"""

from tinycache.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SERIALIZATION_ERROR,
    EXIT_TIME_ERROR,
)


class TinyCacheError(Exception):
    """Base exception for all tinycache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`tinycache.exit_codes`. The CLI entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(TinyCacheError):
    """Raised for configuration problems (invalid project config JSON, bad env values)."""

    exit_code = EXIT_INVALID_USAGE


class EntryNotFoundError(TinyCacheError):
    """Raised by the CLI when no usable entry is stored under a key."""

    exit_code = EXIT_NOT_FOUND


class StoreError(TinyCacheError):
    """Base class for failures surfaced by :mod:`tinycache.store`.

    The original exception, when there is one, is chained as
    ``__cause__``.
    """


class IOError_(StoreError):
    """Raised when the filesystem refuses an operation (missing file, permissions, disk full).

    Named with a trailing underscore to avoid shadowing the built-in
    ``IOError``.
    """

    exit_code = EXIT_IO_ERROR


class SerializationError(StoreError):
    """Raised when a value cannot be encoded, or stored bytes cannot be decoded.

    Includes the case where the bytes decode fine but the result does not
    match the type the caller asked for.
    """

    exit_code = EXIT_SERIALIZATION_ERROR


class TimeError(StoreError):
    """Raised when an entry's modification time lies in the future (clock skew)."""

    exit_code = EXIT_TIME_ERROR
