"""Click CLI wired to an in-memory orchestrator."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from skycache_api import bootstrap
from skycache_api.cache.sql_store import SqlCacheStore
from skycache_api.cli import cli
from skycache_api.services.search_service import SearchOrchestrator
from skycache_api.worker.client import QueryWorker

from .conftest import TRAVEL_DAY


@pytest.fixture
def runner(monkeypatch, sfo_jfk_source, tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli-cache.db'}"
    monkeypatch.setenv("SKYCACHE_CACHE_DATABASE_URL", url)

    def _build(settings, *, with_sweeper=True):
        return SearchOrchestrator(
            SqlCacheStore(settings.cache_database_url),
            sfo_jfk_source,
            QueryWorker(),
        )

    monkeypatch.setattr(bootstrap, "build_orchestrator", _build)
    return CliRunner()


def _invoke(runner, *args):
    return runner.invoke(cli, ["--log-level", "error", *args])


def test_search_prints_table(runner):
    result = _invoke(
        runner, "search", "sfo", "jfk", TRAVEL_DAY.isoformat(), "--adults", "2"
    )
    assert result.exit_code == 0, result.output
    assert "fetched" in result.output
    assert "Outbound: 2 flight(s)" in result.output
    assert "UA108" in result.output


def test_search_json_then_cached(runner, sfo_jfk_source):
    args = ["search", "SFO", "JFK", TRAVEL_DAY.isoformat(), "--json-output"]
    first = _invoke(runner, *args)
    second = _invoke(runner, *args, "--sort", "price")

    assert first.exit_code == 0, first.output
    assert json.loads(first.output)["cached"] is False
    body = json.loads(second.output)
    assert body["cached"] is True
    assert [f["id"] for f in body["outbound"]] == ["dl-1", "ua-1", "aa-1"]
    assert sfo_jfk_source.total_calls == 3


def test_search_rejects_bad_params(runner, sfo_jfk_source):
    result = _invoke(runner, "search", "SFO", "JFK", "not-a-date")
    assert result.exit_code != 0
    assert "validation_error" in result.output
    assert sfo_jfk_source.total_calls == 0


def test_evict_and_clear(runner):
    _invoke(runner, "search", "SFO", "JFK", TRAVEL_DAY.isoformat())

    evicted = _invoke(runner, "evict")
    cleared = _invoke(runner, "clear", "--yes")

    assert evicted.output.strip() == "Evicted 0 expired entries."
    assert cleared.output.strip() == "Cleared 1 entry."
