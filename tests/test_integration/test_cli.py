"""Integration tests for the tinycache command line.

Entries are written through the library and inspected through the CLI, so
both sides agree on hashing and layout.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import tinycache
from tinycache import store
from tinycache.app import app
from tinycache.cache import TinyCache
from tinycache.exceptions import IOError_


@pytest.fixture
def seeded(isolated_env: Path) -> TinyCache:
    """Default-named cache in the isolated working directory with one entry."""
    cache = tinycache.new()
    cache.write("user:42", {"name": "Ada", "langs": ["en", "fr"]})
    return cache


class TestVersion:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"tinycache {tinycache.__version__}" in result.stdout


class TestPath:
    def test_path_uses_default_namespace(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["path", "user:42"])
        assert result.exit_code == 0
        assert result.stdout.strip() == str(tinycache.new().path("user:42"))

    def test_path_with_cache_option(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["--cache", "other", "path", "k"])
        assert result.exit_code == 0
        assert result.stdout.strip() == str(tinycache.with_name("other").path("k"))


class TestShow:
    def test_show_json(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        result = cli_runner.invoke(app, ["--json", "show", "user:42"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"name": "Ada", "langs": ["en", "fr"]}

    def test_show_plain_scalar(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        seeded.write("n", 42)
        result = cli_runner.invoke(app, ["--plain", "show", "n"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "42"

    def test_show_stored_none(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        seeded.write("nothing", None)
        result = cli_runner.invoke(app, ["--json", "show", "nothing"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) is None

    def test_show_missing_exits_4(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "show", "missing"])
        assert result.exit_code == 4

    def test_show_stale_with_max_age(
        self, cli_runner: CliRunner, seeded: TinyCache, backdate
    ) -> None:
        backdate(seeded.path("user:42"), 120)
        result = cli_runner.invoke(app, ["--max-age", "60", "--plain", "show", "user:42"])
        assert result.exit_code == 4
        assert not seeded.path("user:42").exists()

    def test_show_corrupt_self_heals(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        seeded.path("user:42").write_bytes(b"\x00garbage")
        result = cli_runner.invoke(app, ["--plain", "show", "user:42"])
        assert result.exit_code == 4
        assert not seeded.path("user:42").exists()

    def test_show_unreadable_entry_exits_with_store_code(
        self, cli_runner: CliRunner, seeded: TinyCache, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def denied(namespace, key, value_type=None):
            raise IOError_(f"Cannot read {key}: permission denied")

        monkeypatch.setattr(store, "read", denied)
        result = cli_runner.invoke(app, ["--plain", "show", "user:42"])
        assert result.exit_code == IOError_.exit_code == 5
        assert "permission denied" in result.output
        assert "None" not in result.stdout
        assert seeded.path("user:42").is_file()

    def test_show_reads_env_namespace(
        self, cli_runner: CliRunner, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        tinycache.with_name(".from_env").write("k", "v")
        monkeypatch.setenv("TINYCACHE_NAME", ".from_env")
        result = cli_runner.invoke(app, ["--plain", "show", "k"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "v"


class TestAge:
    def test_age_plain(self, cli_runner: CliRunner, seeded: TinyCache, backdate) -> None:
        backdate(seeded.path("user:42"), 30)
        result = cli_runner.invoke(app, ["--plain", "age", "user:42"])
        assert result.exit_code == 0
        assert float(result.stdout.strip()) >= 30

    def test_age_json(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        result = cli_runner.invoke(app, ["--json", "age", "user:42"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["key"] == "user:42"
        assert 0 <= data["age_seconds"] < 5

    def test_age_missing_exits_4(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["age", "missing"])
        assert result.exit_code == 4


class TestInvalidate:
    def test_invalidate_removes_entry(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        result = cli_runner.invoke(app, ["--quiet", "invalidate", "user:42"])
        assert result.exit_code == 0
        assert seeded.read("user:42") is None

    def test_invalidate_missing_is_ok(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["--quiet", "invalidate", "missing"])
        assert result.exit_code == 0


class TestStats:
    def test_stats_json(self, cli_runner: CliRunner, seeded: TinyCache) -> None:
        seeded.write("other", 1)
        result = cli_runner.invoke(app, ["--json", "stats"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["exists"] is True
        assert data["entries"] == 2
        assert data["directory"] == ".tiny_cache"

    def test_stats_plain_missing_namespace(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "stats"])
        assert result.exit_code == 0
        assert "exists\tFalse" in result.stdout


class TestConfigShow:
    def test_defaults(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "cache_name": ".tiny_cache",
            "max_age_seconds": None,
            "ignore_cache": False,
        }

    def test_flags_override(self, cli_runner: CliRunner, isolated_env: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--cache", ".x", "--max-age", "9", "--no-cache", "config", "show"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "cache_name": ".x",
            "max_age_seconds": 9.0,
            "ignore_cache": True,
        }

    def test_invalid_env_exits_2(
        self, cli_runner: CliRunner, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TINYCACHE_MAX_AGE", "later")
        result = cli_runner.invoke(app, ["config", "show"])
        assert result.exit_code == 2
