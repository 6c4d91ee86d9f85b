"""Configuration resolution for tinycache.

Settings come from four layers, highest precedence first:

1. Explicit overrides (CLI flags) passed to :func:`resolve_settings`.
2. Environment variables ``TINYCACHE_NAME``, ``TINYCACHE_MAX_AGE`` and
   ``TINYCACHE_NO_CACHE``.
3. Project-local ``./tinycache.json`` (:func:`load_project_config`).
4. :class:`~tinycache.models.CacheSettings` defaults.

Only the command line resolves settings this way. :func:`tinycache.new`
and :func:`tinycache.with_name` never look at the environment.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from tinycache.exceptions import ConfigError
from tinycache.models import CacheSettings

_PROJECT_CONFIG_FILENAME = "tinycache.json"

ENV_NAME = "TINYCACHE_NAME"
ENV_MAX_AGE = "TINYCACHE_MAX_AGE"
ENV_NO_CACHE = "TINYCACHE_NO_CACHE"

_TRUTHY = ("1", "true", "yes", "on")


def project_config_path() -> Path:
    """Path of the project-local config file in the current working directory."""
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./tinycache.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _env_overrides() -> dict[str, Any]:
    """Collect settings from ``TINYCACHE_*`` environment variables."""
    overrides: dict[str, Any] = {}

    name = os.environ.get(ENV_NAME)
    if name:
        overrides["cache_name"] = name

    max_age = os.environ.get(ENV_MAX_AGE)
    if max_age:
        try:
            overrides["max_age_seconds"] = float(max_age)
        except ValueError:
            raise ConfigError(
                f"{ENV_MAX_AGE} must be a number of seconds, got: {max_age}"
            ) from None

    no_cache = os.environ.get(ENV_NO_CACHE)
    if no_cache:
        overrides["ignore_cache"] = no_cache.strip().lower() in _TRUTHY

    return overrides


def resolve_settings(
    cli_name: Optional[str] = None,
    cli_max_age: Optional[float] = None,
    cli_no_cache: bool = False,
) -> CacheSettings:
    """Merge every configuration layer into the effective settings.

    Args:
        cli_name: ``--cache`` flag value.
        cli_max_age: ``--max-age`` flag value in seconds.
        cli_no_cache: ``--no-cache`` flag. Can only switch lookups off, never
            back on.

    Returns:
        The validated :class:`~tinycache.models.CacheSettings`.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 4 + 3. Defaults overlaid with project config
    data: dict[str, Any] = {}
    project = load_project_config()
    if project is not None:
        data.update(project)

    # 2. Environment
    data.update(_env_overrides())

    # 1. CLI flags
    if cli_name is not None:
        data["cache_name"] = cli_name
    if cli_max_age is not None:
        data["max_age_seconds"] = cli_max_age
    if cli_no_cache:
        data["ignore_cache"] = True

    try:
        return CacheSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cache settings: {exc}") from exc
