"""Pydantic models for tinycache configuration.

:class:`CacheSettings` is the serialisable form of a
:class:`~tinycache.cache.TinyCache` configuration. It is what
``./tinycache.json`` contains, what :func:`~tinycache.config.resolve_settings`
returns, and what ``tinycache config show`` prints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CACHE_NAME = ".tiny_cache"
"""Namespace directory used when no name is given, relative to the working directory."""


class CacheSettings(BaseModel):
    """Resolved cache configuration.

    Example::

        CacheSettings(cache_name=".build_cache", max_age_seconds=3600)
    """

    model_config = ConfigDict(extra="forbid")

    cache_name: str = Field(
        default=DEFAULT_CACHE_NAME,
        min_length=1,
        description="Namespace directory holding the cache entries",
    )
    max_age_seconds: Optional[float] = Field(
        default=None,
        ge=0,
        description="Entries older than this are treated as missing (None = never expire)",
    )
    ignore_cache: bool = Field(
        default=False,
        description="Skip lookups but still write fresh results back",
    )
