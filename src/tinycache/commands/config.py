"""Config commands -- view the effective cache settings.

Provides the ``tinycache config`` sub-command group. Settings are resolved
from CLI flags, ``TINYCACHE_*`` environment variables and the project-local
``tinycache.json``; see :func:`~tinycache.config.resolve_settings`.
"""

from __future__ import annotations

import typer

from tinycache.commands import settings_from_context
from tinycache.output import format_value, info


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Example::

        tinycache config show
        tinycache --json config show
    """
    from tinycache.config import project_config_path

    settings = settings_from_context(ctx)
    path = project_config_path()
    if path.is_file():
        info(f"Project config: {path}")
    format_value(settings.model_dump(mode="json"))
