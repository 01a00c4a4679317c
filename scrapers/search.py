"""
Search adapters
Google Web (with knowledge panel), Wikipedia, Hacker News and Exa neural search.
"""
from typing import List
from urllib.parse import quote

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import build_search_query, is_relevant, truncate
from .providers import ExaAdapter, SerpApiAdapter


class GoogleWebAdapter(SerpApiAdapter):
    """
    Google organic results via SerpAPI, plus the knowledge panel when present.

    Without a SerpAPI key this adapter returns clearly labelled placeholder
    results so the rest of the pipeline can be exercised in development.
    """

    name = "Google Web"
    category = "search"
    timeout_sec = 10.0
    limit = 10
    placeholder_when_unconfigured = True

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        query = f"{build_search_query(profile)} India"
        data = await self._serp({"engine": "google", "q": query, "gl": "in", "hl": "en", "num": str(self.limit)})
        items = self._organic(data)

        panel = data.get("knowledge_graph")
        if isinstance(panel, dict):
            items.append(
                self._result(
                    source="Google Knowledge Panel",
                    url=panel.get("website") or f"https://google.com/search?q={quote(profile.name)}",
                    title=panel.get("title") or profile.name,
                    snippet=panel.get("description"),
                    metadata={"type": panel.get("type"), "attributes": panel.get("attributes")},
                )
            )
        return items[: self.limit]

    def placeholder_results(self, profile: TargetProfile) -> List[SourceResult]:
        org = profile.company or "their organisation"
        rows = [
            (f"{profile.name} - Profile", f"{profile.name} is associated with {org}."),
            (f"{profile.name} interview", f"Placeholder interview coverage of {profile.name}."),
            (f"{profile.name} on leadership", f"Placeholder commentary by {profile.name} on {org}."),
        ]
        return [
            self._result(
                url=f"https://example.com/placeholder/{quote(profile.name)}/{idx}",
                title=f"[PLACEHOLDER] {title}",
                snippet=snippet,
                metadata={"placeholder": True},
            )
            for idx, (title, snippet) in enumerate(rows, start=1)
        ]


class WikipediaAdapter(BaseAdapter):
    """Top Wikipedia page summary for the name, if it actually matches."""

    SEARCH_URL = "https://en.wikipedia.org/w/api.php"
    SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/"

    name = "Wikipedia"
    category = "search"
    timeout_sec = 6.0

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            self.SEARCH_URL,
            params={"action": "query", "list": "search", "srsearch": profile.name, "format": "json", "srlimit": 3},
        )
        pages = list(((data or {}).get("query") or {}).get("search") or [])
        if not pages:
            return []

        top = pages[0]
        summary = await self._get_json(self.SUMMARY_URL + quote(str(top.get("title") or "")))
        title = str(summary.get("title") or top.get("title") or "")
        description = str(summary.get("description") or "")
        if not is_relevant(f"{title} {description}", profile.name):
            return []

        page_url = ((summary.get("content_urls") or {}).get("desktop") or {}).get("page")
        return [
            self._result(
                url=page_url or f"https://en.wikipedia.org/wiki/{quote(title)}",
                title=title,
                snippet=truncate(summary.get("extract"), 500),
                metadata={"pageId": top.get("pageid"), "description": description},
            )
        ]


class HackerNewsAdapter(BaseAdapter):
    """Hacker News stories via the Algolia search API (no key)."""

    ALGOLIA_URL = "https://hn.algolia.com/api/v1/search"

    name = "Hacker News"
    category = "search"
    timeout_sec = 6.0

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            self.ALGOLIA_URL,
            params={"query": profile.name, "tags": "story", "hitsPerPage": 5},
        )
        hits = [hit for hit in list((data or {}).get("hits") or []) if is_relevant(hit.get("title") or "", profile.name)]
        return [
            self._result(
                url=f"https://news.ycombinator.com/item?id={hit.get('objectID')}",
                title=hit.get("title"),
                snippet=truncate(hit.get("story_text"), 300),
                date=hit.get("created_at"),
                metadata={"points": hit.get("points")},
            )
            for hit in hits[:3]
        ]


class ExaSearchAdapter(ExaAdapter):
    name = "Exa Neural Search"
    category = "search"

    def source_for(self, url: str) -> str:
        return self.name

    def build_query(self, profile: TargetProfile) -> str:
        return f"{profile.name} {profile.company or ''} reputation India"
