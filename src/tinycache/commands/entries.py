"""Entry commands -- inspect and remove single cache entries.

All commands address an entry by its logical key; the on-disk digest is
computed the same way :class:`~tinycache.cache.TinyCache` does. Reading
goes through the cache facade, so ``show`` honours ``--max-age`` and
deletes stale or undecodable entries exactly like a library lookup would.
"""

from __future__ import annotations

import typer

from tinycache import store
from tinycache.commands import cache_from_context, fail
from tinycache.exceptions import EntryNotFoundError, StoreError
from tinycache.output import (
    OutputFormat,
    debug,
    format_value,
    get_output,
    info,
    print_data,
    print_table,
    success,
)


def path_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Logical cache key."),
) -> None:
    """Print the file path an entry is (or would be) stored at.

    Example::

        tinycache path "user:42"
    """
    cache = cache_from_context(ctx)
    print_data(str(cache.path(key)))


def age_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Logical cache key."),
) -> None:
    """Print the age of an entry in seconds.

    Exits with code 4 when the entry does not exist or its age cannot be
    computed.
    """
    cache = cache_from_context(ctx)
    age = cache.item_age(key)
    if age is None:
        fail(EntryNotFoundError(f"No entry for key '{key}' in {cache.cache_name}"))

    seconds = round(age.total_seconds(), 3)
    if get_output().format == OutputFormat.JSON:
        format_value({"key": key, "age_seconds": seconds})
    else:
        print_data(f"{seconds:.3f}")


def show_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Logical cache key."),
) -> None:
    """Print the decoded value stored under KEY.

    Stale entries (with ``--max-age``) and entries that fail to decode are
    deleted and reported as missing (exit code 4). An entry that exists but
    cannot be read exits with the storage error's code.
    """
    cache = cache_from_context(ctx)
    value = cache.read(key)
    if value is None:
        if not cache.path(key).is_file():
            fail(EntryNotFoundError(f"No entry for key '{key}' in {cache.cache_name}"))
        # The file survived the lookup: either a stored None or an entry the
        # facade could not read. Re-read without swallowing to tell them apart.
        try:
            value = store.read(cache.cache_name, key)
        except StoreError as exc:
            fail(exc)

    debug(f"Entry file: {cache.path(key)}")
    format_value(value)


def invalidate_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Logical cache key."),
) -> None:
    """Delete the entry stored under KEY. Missing entries are not an error."""
    cache = cache_from_context(ctx)
    existed = cache.path(key).is_file()
    cache.invalidate(key)
    if existed:
        success(f"Invalidated '{key}'")
    else:
        info(f"No entry for key '{key}'")


def stats_command(ctx: typer.Context) -> None:
    """Show the namespace directory, entry count and total size."""
    cache = cache_from_context(ctx)
    try:
        stats = store.namespace_stats(cache.cache_name)
    except StoreError as exc:
        fail(exc)

    if get_output().format == OutputFormat.JSON:
        format_value(stats)
        return
    rows = [[field, str(value)] for field, value in stats.items()]
    print_table(["Field", "Value"], rows, title="Cache")
