"""Command implementations for the ``tinycache`` CLI.

Each module holds one group of commands; :mod:`tinycache.app` registers
them on the root Typer application. The helpers here turn the global
options stored in ``ctx.obj`` into a :class:`~tinycache.cache.TinyCache`.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from tinycache.cache import TinyCache
from tinycache.exceptions import ConfigError, TinyCacheError
from tinycache.models import CacheSettings
from tinycache.output import error


def fail(exc: TinyCacheError) -> NoReturn:
    """Report *exc* on stderr and exit with its ``exit_code``."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def settings_from_context(ctx: typer.Context) -> CacheSettings:
    """Resolve settings from the root callback's flags, config file and environment."""
    from tinycache.config import resolve_settings

    obj = ctx.obj or {}
    try:
        return resolve_settings(
            cli_name=obj.get("cache_name"),
            cli_max_age=obj.get("max_age"),
            cli_no_cache=obj.get("no_cache", False),
        )
    except ConfigError as exc:
        fail(exc)


def cache_from_context(ctx: typer.Context) -> TinyCache:
    """The :class:`TinyCache` selected by the global options."""
    return TinyCache.from_settings(settings_from_context(ctx))
