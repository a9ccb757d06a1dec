"""Tests for component wiring and the one-shot CLI run."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from fxquotes.config import CacheSettings, RetrySettings
from fxquotes.engine.aggregator import Aggregator
from fxquotes.engine.cache import QuoteCache
from fxquotes.engine.retry import RetryPolicy
from fxquotes.engine.service import QuotesService
from fxquotes.exceptions import SourceError
from fxquotes.main import _build_components, _release_resources, run_once
from fxquotes.sources import NomadSource


def _components(sources) -> dict:
    browser = MagicMock()
    browser.close = AsyncMock()
    http = MagicMock()
    http.close = AsyncMock()
    aggregator = Aggregator(sources, RetryPolicy(RetrySettings(max_attempts=1)))
    return {
        "browser": browser,
        "http": http,
        "sources": sources,
        "aggregator": aggregator,
        "quotes_service": QuotesService(aggregator),
    }


class TestBuildComponents:
    def test_wires_enabled_sources(self, mock_settings) -> None:
        components = _build_components(mock_settings)

        assert [type(s) for s in components["sources"]] == [NomadSource]
        assert components["cache"] is None
        assert components["aggregator"].sources == components["sources"]
        assert components["quotes_service"].aggregator is components["aggregator"]
        assert components["browser"].is_running is False

    def test_cache_built_when_enabled(self, mock_settings) -> None:
        mock_settings.cache = CacheSettings(enabled=True, ttl_seconds=30)
        components = _build_components(mock_settings)
        assert isinstance(components["cache"], QuoteCache)
        assert components["aggregator"].cache is components["cache"]


class TestReleaseResources:
    @pytest.mark.asyncio
    async def test_closes_everything_even_after_failure(self, fake_source, make_quote) -> None:
        first = fake_source("Wise", [make_quote()])
        first.close = AsyncMock(side_effect=RuntimeError("already closed"))
        second = fake_source("Nomad", [make_quote()])
        components = _components([first, second])

        await _release_resources(components)

        first.close.assert_awaited_once()
        assert second.closed is True
        components["http"].close.assert_awaited_once()
        components["browser"].close.assert_awaited_once()


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_prints_report(self, fake_source, make_quote, capsys) -> None:
        sources = [
            fake_source("Wise", [make_quote("5.0000", "4.9000", source="wise")]),
            fake_source("Nubank", [SourceError("blocked")]),
        ]
        components = _components(sources)

        exit_code = await run_once(components)

        assert exit_code == 0
        report = json.loads(capsys.readouterr().out)
        assert [q["source"] for q in report["quotes"]] == ["wise"]
        assert report["average"]["sources_count"] == 1
        assert report["slippage"][0]["buy_price_slippage_pct"] == 0.0
        assert report["failures"] == [{"source": "Nubank", "error": "blocked", "attempts": 1}]
        assert all(s.closed for s in sources)

    @pytest.mark.asyncio
    async def test_all_failed_returns_1(self, fake_source, capsys) -> None:
        sources = [fake_source("Wise", [SourceError("timeout")])]
        components = _components(sources)

        exit_code = await run_once(components)

        assert exit_code == 1
        assert capsys.readouterr().out == ""
        assert sources[0].closed is True
