"""Cache facade: typed get-or-compute on top of :mod:`tinycache.store`.

A :class:`TinyCache` is nothing but configuration: a namespace directory,
an optional maximum entry age and an ignore-cache flag. It is a frozen
pydantic model, so :meth:`TinyCache.max_age` and :meth:`TinyCache.no_cache`
return derived copies and a base configuration can be shared freely.

Every lookup walks the same states:

* **Fresh** -- the entry exists, is young enough and decodes. It is returned
  and the producer is not called.
* **Stale** -- the entry is older than ``max_cache_age``. It is deleted and
  the lookup continues as a miss.
* **Corrupt** -- the entry exists but does not decode (or not as the
  requested type). It is deleted and the lookup continues as a miss.
* **Missing** -- no entry, or ``ignore_cache`` is set. The producer computes
  the value, which is written back.

Storage failures never reach the caller. They are logged through
:mod:`logging` (debug for hits, misses and saves, warning for swallowed
errors) and otherwise ignored. Exceptions raised by the producer itself
propagate unchanged.

Example::

    import tinycache

    cache = tinycache.with_name(".api_cache").max_age(3600)
    user = cache.get_cached_or_fetch("user:42", lambda: fetch_user(42))
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from tinycache import store
from tinycache.exceptions import SerializationError, StoreError
from tinycache.models import DEFAULT_CACHE_NAME, CacheSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


class TinyCache(BaseModel):
    """Immutable handle on one cache namespace.

    Attributes:
        cache_name: Directory holding the entries. Relative names resolve
            against the current working directory at call time.
        max_cache_age: Entries older than this are stale. ``None`` means
            entries never expire by age.
        ignore_cache: When set, lookups are skipped (every fetch calls the
            producer) but results are still written back.
    """

    model_config = ConfigDict(frozen=True)

    cache_name: str = Field(default=DEFAULT_CACHE_NAME, min_length=1)
    max_cache_age: Optional[timedelta] = None
    ignore_cache: bool = False

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def new(cls) -> TinyCache:
        """Cache in the default ``.tiny_cache`` directory."""
        return cls()

    @classmethod
    def with_name(cls, cache_name: Union[str, Path]) -> TinyCache:
        """Cache in the directory *cache_name*."""
        return cls(cache_name=str(cache_name))

    @classmethod
    def from_settings(cls, settings: CacheSettings) -> TinyCache:
        """Build a cache from resolved :class:`~tinycache.models.CacheSettings`."""
        cache = cls(cache_name=settings.cache_name, ignore_cache=settings.ignore_cache)
        if settings.max_age_seconds is not None:
            cache = cache.max_age(settings.max_age_seconds)
        return cache

    def max_age(self, duration: Union[timedelta, float]) -> TinyCache:
        """Return a copy whose entries expire after *duration*.

        Args:
            duration: A :class:`~datetime.timedelta` or a number of seconds.
        """
        if not isinstance(duration, timedelta):
            duration = timedelta(seconds=duration)
        return self.model_copy(update={"max_cache_age": duration})

    def no_cache(self) -> TinyCache:
        """Return a copy that skips lookups but keeps writing results."""
        return self.model_copy(update={"ignore_cache": True})

    # ------------------------------------------------------------------ #
    # Cache protocol
    # ------------------------------------------------------------------ #

    def get_cached_or_fetch(
        self,
        item_key: str,
        fetch_with: Callable[[], T],
        value_type: Optional[type[T]] = None,
    ) -> T:
        """Return the cached value for *item_key*, or compute and store it.

        Args:
            item_key: Logical cache key.
            fetch_with: Zero-argument producer called on a miss.
            value_type: Optional expected type of the cached value. A stored
                value of another type counts as corrupt.

        Returns:
            The cached value on a fresh hit, otherwise whatever
            *fetch_with* returned.
        """
        key = str(item_key)
        if self.ignore_cache:
            logger.debug("Ignoring cache on %r", key)
        else:
            value = self._lookup(key, value_type)
            if value is not _MISSING:
                return value

        value = fetch_with()
        self.write(key, value)
        return value

    def write(self, item_key: str, value: Any) -> None:
        """Store *value* under *item_key*. Failures are logged, never raised."""
        key = str(item_key)
        try:
            store.write(self.cache_name, key, value)
        except StoreError as exc:
            logger.warning("Failed to write to cache `%s` -> `%s`: %s", key, self.cache_name, exc)
        else:
            logger.debug("SAVE `%s` -> `%s`", key, self.cache_name)

    def read(self, item_key: str, value_type: Optional[type[T]] = None) -> Optional[T]:
        """Return the stored value, or ``None`` if there is no usable entry.

        Stale and undecodable entries are deleted as a side effect. A stored
        ``None`` cannot be told apart from a miss here;
        :meth:`get_cached_or_fetch` does treat it as a hit.
        """
        value = self._lookup(str(item_key), value_type)
        if value is _MISSING:
            return None
        return value

    def invalidate(self, item_key: str) -> None:
        """Delete the entry for *item_key* if present. Failures are logged, never raised."""
        key = str(item_key)
        try:
            store.remove(self.cache_name, key)
        except StoreError as exc:
            logger.warning("Failed to invalidate cache `%s` -> `%s`: %s", key, self.cache_name, exc)
        else:
            logger.debug("INVALIDATED `%s` -> `%s`", key, self.cache_name)

    def item_age(self, item_key: str) -> Optional[timedelta]:
        """Time since the entry was written, or ``None`` if it cannot be determined."""
        try:
            return store.item_age(self.cache_name, str(item_key))
        except StoreError as exc:
            logger.debug("No age for `%s`: %s", item_key, exc)
            return None

    def path(self, item_key: str) -> Path:
        """Filesystem path the entry for *item_key* is (or would be) stored at."""
        return store.resolve_path(self.cache_name, str(item_key))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _lookup(self, key: str, value_type: Optional[type[T]]) -> Any:
        """Run the Fresh/Stale/Corrupt/Missing check, returning ``_MISSING`` on a miss."""
        if self.max_cache_age is not None:
            age = self.item_age(key)
            if age is not None and age > self.max_cache_age:
                logger.debug("CACHE `%s` -> TOO OLD. AGE: %s", key, age)
                self.invalidate(key)
                return _MISSING

        try:
            value = store.read(self.cache_name, key, value_type)
        except SerializationError as exc:
            logger.warning("Failed to deserialize %s, invalidating cache -> `%s`", exc, key)
            self.invalidate(key)
            return _MISSING
        except StoreError as exc:
            logger.debug("MISS `%s` -> `%s`: %s", key, self.cache_name, exc)
            return _MISSING

        logger.debug("HIT `%s` -> `%s`", key, self.cache_name)
        return value
