"""Unit tests for provider adapters and the resilient call wrapper."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from config import ProviderCredentials
from core import TargetProfile
from scrapers import (
    EnforcementNewsAdapter,
    GoogleWebAdapter,
    PodcastIndexAdapter,
    RegulatorySitesAdapter,
    RSSFeedsAdapter,
    TwitterAdapter,
    WikipediaAdapter,
)
from scrapers.base import BaseAdapter, resilient
from scrapers.helpers import domain_of, is_relevant, parse_rss_items


PROFILE = TargetProfile(name="Ada Lovelace", company="Analytical Engines", role="Founder")


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class _SlowAdapter(BaseAdapter):
    name = "Slow"
    category = "search"
    timeout_sec = 0.05

    async def fetch(self, profile):
        await asyncio.sleep(1.0)
        return [self._result(url="https://example.com/late", title="late")]


class _BrokenAdapter(BaseAdapter):
    name = "Broken"
    category = "news"

    async def fetch(self, profile):
        raise RuntimeError("boom")


def test_is_relevant_requires_every_name_part() -> None:
    assert is_relevant("Ada Lovelace speaks at the summit", "Ada Lovelace")
    assert not is_relevant("Ada speaks at the summit", "Ada Lovelace")
    # short parts never count as a multi-part match
    assert not is_relevant("Li Na wins again", "Li Na")
    assert is_relevant("Interview with Madonna", "Madonna")


def test_domain_of_strips_www() -> None:
    assert domain_of("https://www.reuters.com/world/x") == "reuters.com"
    assert domain_of("") == ""


def test_parse_rss_items_raises_value_error_on_bad_xml() -> None:
    with pytest.raises(ValueError):
        parse_rss_items("<rss><channel><item>")


@pytest.mark.asyncio
async def test_resilient_turns_timeout_into_error_string() -> None:
    outcome = await _SlowAdapter().run(PROFILE)

    assert outcome.results == []
    assert outcome.error.startswith("Slow: timed out")
    assert outcome.skipped is False


@pytest.mark.asyncio
async def test_resilient_contains_unexpected_exceptions() -> None:
    outcome = await _BrokenAdapter().run(PROFILE)

    assert outcome.results == []
    assert outcome.error == "Broken: boom"


@pytest.mark.asyncio
async def test_resilient_passes_results_through() -> None:
    async def _call():
        return []

    outcome = await resilient("Empty", _call, timeout_sec=1.0)
    assert outcome.error is None
    assert outcome.results == []


@pytest.mark.asyncio
async def test_unconfigured_adapter_is_skipped_without_request() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request: {request.url}")

    async with _client(_handler) as client:
        adapter = TwitterAdapter(ProviderCredentials(x_bearer_token=None), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.skipped is True
    assert outcome.attempted is False
    assert outcome.results == []
    assert outcome.error is None


@pytest.mark.asyncio
async def test_google_web_returns_labelled_placeholders_without_key() -> None:
    adapter = GoogleWebAdapter(ProviderCredentials(serpapi_key=None))
    outcome = await adapter.run(PROFILE)

    assert outcome.skipped is False
    assert len(outcome.results) == 3
    for item in outcome.results:
        assert item.title.startswith("[PLACEHOLDER]")
        assert item.metadata["placeholder"] is True
        assert item.url.startswith("https://example.com/placeholder/")


@pytest.mark.asyncio
async def test_google_web_parses_organic_and_knowledge_panel() -> None:
    seen = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "organic_results": [
                    {"position": 1, "link": "https://example.com/a", "title": "Ada Lovelace profile", "snippet": "x"},
                    {"position": 2, "link": "https://example.com/b", "title": "Ada Lovelace talk", "snippet": "y"},
                ],
                "knowledge_graph": {"title": "Ada Lovelace", "description": "Mathematician", "website": "https://ada.dev"},
            },
        )

    async with _client(_handler) as client:
        adapter = GoogleWebAdapter(ProviderCredentials(serpapi_key="serp-key"), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.error is None
    assert [item.source for item in outcome.results] == ["Google Web", "Google Web", "Google Knowledge Panel"]
    assert all(item.category == "search" for item in outcome.results)
    assert seen["params"]["api_key"] == "serp-key"
    assert seen["params"]["engine"] == "google"


@pytest.mark.asyncio
async def test_http_error_becomes_module_error_entry() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    async with _client(_handler) as client:
        adapter = GoogleWebAdapter(ProviderCredentials(serpapi_key="serp-key"), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.results == []
    assert outcome.error == "Google Web: HTTP 429"


@pytest.mark.asyncio
async def test_wikipedia_drops_irrelevant_top_page() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/w/api.php":
            return httpx.Response(200, json={"query": {"search": [{"title": "Lovelace (film)", "pageid": 7}]}})
        return httpx.Response(200, json={"title": "Lovelace (film)", "description": "2013 biographical film"})

    async with _client(_handler) as client:
        outcome = await WikipediaAdapter(client=client).run(PROFILE)

    assert outcome.error is None
    assert outcome.results == []


@pytest.mark.asyncio
async def test_wikipedia_maps_summary() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/w/api.php":
            return httpx.Response(200, json={"query": {"search": [{"title": "Ada Lovelace", "pageid": 42}]}})
        return httpx.Response(
            200,
            json={
                "title": "Ada Lovelace",
                "description": "English mathematician",
                "extract": "Augusta Ada King was an English mathematician.",
                "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Ada_Lovelace"}},
            },
        )

    async with _client(_handler) as client:
        outcome = await WikipediaAdapter(client=client).run(PROFILE)

    assert len(outcome.results) == 1
    item = outcome.results[0]
    assert item.source == "Wikipedia"
    assert item.url == "https://en.wikipedia.org/wiki/Ada_Lovelace"
    assert item.metadata["pageId"] == 42


@pytest.mark.asyncio
async def test_rss_adapter_skips_broken_feed_and_filters_by_name() -> None:
    good_feed = """
    <rss><channel>
      <item><title>Ada Lovelace opens new lab</title><link>https://news.example/1</link>
        <description>Founder of Analytical Engines</description></item>
      <item><title>Markets close higher</title><link>https://news.example/2</link></item>
    </channel></rss>
    """.strip()

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "good.example":
            return httpx.Response(200, text=good_feed)
        return httpx.Response(200, text="<rss><channel><item>")

    async with _client(_handler) as client:
        adapter = RSSFeedsAdapter(
            client=client,
            feeds=(("Good Feed", "https://good.example/rss"), ("Bad Feed", "https://bad.example/rss")),
        )
        outcome = await adapter.run(PROFILE)

    assert outcome.error is None
    assert [item.title for item in outcome.results] == ["Ada Lovelace opens new lab"]
    assert outcome.results[0].source == "Good Feed"
    assert outcome.results[0].category == "news"


@pytest.mark.asyncio
async def test_regulatory_sites_tag_regulatory_body() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        site = query.split()[0].split(":", 1)[1]
        return httpx.Response(
            200,
            json={"organic_results": [{"link": f"https://{site}/order/{abs(hash(query)) % 1000}", "title": query}]},
        )

    async with _client(_handler) as client:
        adapter = RegulatorySitesAdapter(ProviderCredentials(serpapi_key="k"), client=client)
        outcome = await adapter.run(PROFILE)

    bodies = {item.source: item.metadata["regulatoryBody"] for item in outcome.results}
    assert bodies == {"SEBI": "SEBI", "RBI": "RBI", "MCA India": "MCA India"}
    assert all(item.category == "regulatory" for item in outcome.results)


@pytest.mark.asyncio
async def test_enforcement_news_marks_crisis_signals() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["type"] == "keyword"
        assert request.headers["x-api-key"] == "exa-key"
        return httpx.Response(
            200,
            json={
                "results": [
                    {"url": "https://news.example/ed", "title": "ED probes Ada Lovelace firm", "text": "..."},
                    {"url": "https://news.example/other", "title": "Unrelated probe", "text": "nothing"},
                ]
            },
        )

    async with _client(_handler) as client:
        adapter = EnforcementNewsAdapter(ProviderCredentials(exa_api_key="exa-key"), client=client)
        outcome = await adapter.run(PROFILE)

    assert len(outcome.results) == 1
    item = outcome.results[0]
    assert item.source == "ED/CBI/SFIO (Enforcement)"
    assert item.is_crisis_signal is True


def _site_search_handler(failing_site: str = None, slow_site: str = None):
    async def _handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        site = query.split()[0].split(":", 1)[1]
        if site == failing_site:
            return httpx.Response(500, json={"error": "upstream"})
        if site == slow_site:
            await asyncio.sleep(1.0)
        return httpx.Response(
            200,
            json={"organic_results": [{"link": f"https://{site}/order/{abs(hash(query)) % 1000}", "title": query}]},
        )

    return _handler


@pytest.mark.asyncio
async def test_one_failing_site_keeps_hits_from_the_others() -> None:
    async with _client(_site_search_handler(failing_site="rbi.org.in")) as client:
        adapter = RegulatorySitesAdapter(ProviderCredentials(serpapi_key="k"), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.error is None
    assert {item.source for item in outcome.results} == {"SEBI", "MCA India"}
    assert len(outcome.results) == 4


@pytest.mark.asyncio
async def test_slow_site_is_dropped_without_timing_out_the_adapter() -> None:
    class _QuickSites(RegulatorySitesAdapter):
        subquery_timeout_sec = 0.05

    async with _client(_site_search_handler(slow_site="mca.gov.in")) as client:
        adapter = _QuickSites(ProviderCredentials(serpapi_key="k"), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.error is None
    assert {item.source for item in outcome.results} == {"SEBI", "RBI"}


@pytest.mark.asyncio
async def test_every_site_failing_reports_the_http_status() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    async with _client(_handler) as client:
        adapter = RegulatorySitesAdapter(ProviderCredentials(serpapi_key="k"), client=client)
        outcome = await adapter.run(PROFILE)

    assert outcome.results == []
    assert outcome.error == "Regulatory Registries: HTTP 500"


@pytest.mark.asyncio
async def test_podcast_index_keeps_feeds_when_episode_search_fails() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-Auth-Key"] == "pk"
        if request.url.path.endswith("/search/byterm"):
            return httpx.Response(
                200,
                json={"feeds": [{"title": "Ada Lovelace Talks", "url": "https://pod.example/feed", "description": "x"}]},
            )
        return httpx.Response(503)

    credentials = ProviderCredentials(podcast_index_key="pk", podcast_index_secret="ps")
    async with _client(_handler) as client:
        outcome = await PodcastIndexAdapter(credentials, client=client).run(PROFILE)

    assert outcome.error is None
    assert [item.title for item in outcome.results] == ["Ada Lovelace Talks"]
    assert outcome.results[0].category == "video"
