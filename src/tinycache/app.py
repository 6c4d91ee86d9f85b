"""Typer application and CLI entry point for tinycache.

The command line is a thin inspection tool over a cache namespace: it
prints entry paths and ages, shows decoded values, invalidates entries and
summarises the namespace directory. Library users never need it.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.

See Also:
    :mod:`tinycache.config`: How ``--cache``/``--max-age``/``--no-cache``
    combine with the environment and ``tinycache.json``.
    :mod:`tinycache.output`: Output formatting initialised in
    :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from tinycache import __version__
from tinycache.commands.config import config_app
from tinycache.commands.entries import (
    age_command,
    invalidate_command,
    path_command,
    show_command,
    stats_command,
)
from tinycache.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="tinycache",
    help="Inspect and maintain a tinycache directory.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("path")(path_command)
app.command("age")(age_command)
app.command("show")(show_command)
app.command("invalidate")(invalidate_command)
app.command("stats")(stats_command)
app.add_typer(config_app, name="config", help="Configuration inspection.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"tinycache {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``tinycache.*`` debug records to stderr through Rich when verbose."""
    logger = logging.getLogger("tinycache")
    if not verbose:
        return
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        )
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    cache_name: Optional[str] = typer.Option(
        None, "--cache", "-c", help="Cache directory (default: .tiny_cache)."
    ),
    max_age: Optional[float] = typer.Option(
        None, "--max-age", min=0, help="Treat entries older than this many seconds as missing."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Ignore stored entries on lookup."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~tinycache.output.OutputManager` and stores
    the cache selection flags in ``ctx.obj``. Settings are resolved lazily
    by each command so that configuration errors surface with the right
    exit code.
    """
    from tinycache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["cache_name"] = cache_name
    ctx.obj["max_age"] = max_age
    ctx.obj["no_cache"] = no_cache


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``tinycache`` console script.

    :class:`~tinycache.exceptions.TinyCacheError` instances that escape a
    command cause a clean exit with the error's ``exit_code``; anything else
    is reported and exits with :data:`EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from tinycache.exceptions import TinyCacheError
        from tinycache.output import error

        if isinstance(exc, TinyCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
