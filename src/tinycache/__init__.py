"""tinycache -- a small on-disk cache for picklable values.

Each entry is one file named by the SHA-1 digest of its key, inside a
namespace directory. The file's modification time is the entry's age, which
drives optional expiry. Lookups that hit stale or corrupt entries delete them
and fall back to the caller's producer function.

Typical usage::

    import tinycache

    cache = tinycache.with_name(".my_cache").max_age(600)
    value = cache.get_cached_or_fetch("report:2024", build_report)

Modules:
    cache: The :class:`TinyCache` facade (lookup policy, error swallowing).
    store: Filesystem layer (hashing, paths, read/write/remove, age).
    config: Settings resolution for the command line.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command-line interface.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from tinycache.cache import TinyCache
from tinycache.exceptions import (
    IOError_,
    SerializationError,
    StoreError,
    TimeError,
    TinyCacheError,
)
from tinycache.models import DEFAULT_CACHE_NAME, CacheSettings

__version__ = "0.1.0"

__all__ = [
    "CacheSettings",
    "DEFAULT_CACHE_NAME",
    "IOError_",
    "SerializationError",
    "StoreError",
    "TimeError",
    "TinyCache",
    "TinyCacheError",
    "new",
    "with_name",
]


def new() -> TinyCache:
    """Return a cache using the default ``.tiny_cache`` directory."""
    return TinyCache.new()


def with_name(name: Union[str, Path]) -> TinyCache:
    """Return a cache using the directory *name*."""
    return TinyCache.with_name(name)
