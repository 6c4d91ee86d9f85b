"""Shared test fixtures for tinycache.

Provides isolated working directories, cache namespaces under ``tmp_path``,
a CLI runner, and resets global output state between tests.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tinycache.cache import TinyCache
from tinycache.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager binds Rich consoles to the streams that were current
    when it was created; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """A namespace directory path that does not exist yet."""
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_dir: Path) -> TinyCache:
    """A TinyCache rooted in a disposable namespace directory."""
    return TinyCache.with_name(cache_dir)


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in tmp_path with no ``TINYCACHE_*`` variables set.

    Returns:
        The tmp_path root, which is also the working directory.
    """
    for var in ["TINYCACHE_NAME", "TINYCACHE_MAX_AGE", "TINYCACHE_NO_CACHE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Entry age helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def backdate():
    """Return a function that shifts a file's mtime *seconds* into the past.

    Negative values move it into the future, which is how clock skew is
    simulated.
    """

    def _backdate(path: Path, seconds: float) -> None:
        stamp = path.stat().st_mtime - seconds
        os.utime(path, (stamp, stamp))

    return _backdate


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
