"""Tests for domain source modules (settle-all adapter fan-out)."""

from __future__ import annotations

import asyncio

import pytest

from config import ProviderCredentials, Settings
from core import TargetProfile
from scrapers.base import AdapterOutcome, BaseAdapter
from sources import MODULE_ORDER, SourceModule, build_source_modules


PROFILE = TargetProfile(name="Ada Lovelace")


class _StaticAdapter(BaseAdapter):
    category = "news"

    def __init__(self, name: str, titles, delay: float = 0.0, **kwargs):
        super().__init__(**kwargs)
        self.name = name
        self.titles = list(titles)
        self.delay = delay

    async def fetch(self, profile):
        if self.delay:
            await asyncio.sleep(self.delay)
        return [self._result(url=f"https://{self.name.lower()}.example/{i}", title=t) for i, t in enumerate(self.titles)]


class _EscapingAdapter(_StaticAdapter):
    async def run(self, profile) -> AdapterOutcome:
        raise RuntimeError("wrapper bypassed")


class _KeyedAdapter(_StaticAdapter):
    requires = ("newsapi_key",)


@pytest.mark.asyncio
async def test_module_settles_every_adapter() -> None:
    module = SourceModule(
        "news",
        [
            _StaticAdapter("Fast", ["a", "b"]),
            _StaticAdapter("Slow", ["c"], delay=0.02),
            _EscapingAdapter("Leaky", ["never"]),
        ],
    )

    result = await module.scan(PROFILE)

    assert result.module == "news"
    assert sorted(item.title for item in result.results) == ["a", "b", "c"]
    assert result.errors == ["Leaky: wrapper bypassed"]
    assert result.sources_scanned == 3
    assert result.duration_ms >= 0


@pytest.mark.asyncio
async def test_skipped_adapters_do_not_count_as_scanned() -> None:
    credentials = ProviderCredentials(newsapi_key=None)
    module = SourceModule(
        "news",
        [_StaticAdapter("Open", ["x"]), _KeyedAdapter("Keyed", ["y"], credentials=credentials)],
    )

    result = await module.scan(PROFILE)

    assert [item.title for item in result.results] == ["x"]
    assert result.sources_scanned == 1
    assert result.errors == []


@pytest.mark.asyncio
async def test_module_with_every_adapter_failing_still_returns() -> None:
    module = SourceModule("social", [_EscapingAdapter("A", []), _EscapingAdapter("B", [])])

    result = await module.scan(PROFILE)

    assert result.results == []
    assert len(result.errors) == 2


def test_build_source_modules_fixed_order_and_shared_credentials() -> None:
    settings = Settings(providers=ProviderCredentials(serpapi_key="k"))
    modules = build_source_modules(settings)

    assert tuple(module.name for module in modules) == MODULE_ORDER
    for module in modules:
        assert module.adapters
        for adapter in module.adapters:
            assert adapter.credentials is settings.providers
            assert adapter.category == module.name
