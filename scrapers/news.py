"""
News adapters
Business RSS feeds, NewsAPI, The Guardian, the New York Times and Exa news search.
"""
from typing import List, Sequence, Tuple

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import first_text, is_relevant, parse_rss_items, rss_text, strip_html, truncate
from .providers import ExaAdapter


BUSINESS_RSS_FEEDS: Tuple[Tuple[str, str], ...] = (
    ("Economic Times", "https://economictimes.indiatimes.com/rssfeedstopstories.cms"),
    ("Business Standard", "https://www.business-standard.com/rss/home_page_top_stories.rss"),
    ("Livemint", "https://www.livemint.com/rss/news"),
    ("Financial Express", "https://www.financialexpress.com/feed/"),
    ("Moneycontrol", "https://www.moneycontrol.com/rss/latestnews.xml"),
    ("NDTV Profit", "https://www.ndtv.com/business/feeds/rss"),
    ("Forbes India", "https://www.forbesindia.com/blog/feed/"),
    ("YourStory", "https://yourstory.com/feed"),
    ("Inc42", "https://inc42.com/feed/"),
)


class RSSFeedsAdapter(BaseAdapter):
    """
    Keyless business RSS feeds, filtered to items that mention the target.

    Feeds are fetched concurrently; one broken feed only loses that feed.
    """

    name = "RSS Feeds"
    category = "news"
    timeout_sec = 12.0
    per_feed: int = 4

    def __init__(self, *args, feeds: Sequence[Tuple[str, str]] = BUSINESS_RSS_FEEDS, **kwargs):
        super().__init__(*args, **kwargs)
        self.feeds = tuple(feeds)

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        return await self._settle([(label, self._fetch_feed(label, url, profile)) for label, url in self.feeds])

    async def _fetch_feed(self, label: str, url: str, profile: TargetProfile) -> List[SourceResult]:
        xml_text = await self._get_text(url)
        items: List[SourceResult] = []
        for node in parse_rss_items(xml_text)[: self.per_feed * 3]:
            title = strip_html(rss_text(node, "title"))
            description = strip_html(first_text(rss_text(node, "description"), rss_text(node, "summary")))
            if not title or not is_relevant(f"{title} {description}", profile.name):
                continue
            items.append(
                self._result(
                    source=label,
                    url=first_text(rss_text(node, "link"), rss_text(node, "guid"), url),
                    title=title,
                    snippet=truncate(description, 300),
                    date=first_text(rss_text(node, "pubDate"), rss_text(node, "published")),
                    metadata={"rss": True},
                )
            )
            if len(items) >= self.per_feed:
                break
        return items


class NewsAPIAdapter(BaseAdapter):
    EVERYTHING_URL = "https://newsapi.org/v2/everything"

    name = "NewsAPI"
    category = "news"
    timeout_sec = 10.0
    requires = ("newsapi_key",)

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        query = f'"{profile.name}"'
        if profile.company:
            query += f' OR "{profile.company}"'
        data = await self._get_json(
            self.EVERYTHING_URL,
            params={
                "q": query,
                "language": "en",
                "sortBy": "relevancy",
                "pageSize": 10,
                "apiKey": self.credentials.newsapi_key,
            },
        )
        return [
            self._result(
                source=((article.get("source") or {}).get("name")) or self.name,
                url=article.get("url"),
                title=article.get("title"),
                snippet=article.get("description"),
                date=article.get("publishedAt"),
                metadata={"api": "newsapi"},
            )
            for article in list((data or {}).get("articles") or [])[:8]
        ]


class GuardianAdapter(BaseAdapter):
    SEARCH_URL = "https://content.guardianapis.com/search"

    name = "The Guardian"
    category = "news"
    timeout_sec = 8.0
    requires = ("guardian_api_key",)

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            self.SEARCH_URL,
            params={
                "q": f'"{profile.name}"',
                "show-fields": "trailText,byline",
                "page-size": 5,
                "api-key": self.credentials.guardian_api_key,
            },
        )
        rows = list(((data or {}).get("response") or {}).get("results") or [])
        return [
            self._result(
                url=row.get("webUrl"),
                title=row.get("webTitle"),
                snippet=strip_html((row.get("fields") or {}).get("trailText") or ""),
                date=row.get("webPublicationDate"),
            )
            for row in rows
        ]


class NYTimesAdapter(BaseAdapter):
    SEARCH_URL = "https://api.nytimes.com/svc/search/v2/articlesearch.json"

    name = "New York Times"
    category = "news"
    timeout_sec = 8.0
    requires = ("nyt_api_key",)

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            self.SEARCH_URL,
            params={
                "q": f'"{profile.name}"',
                "sort": "relevance",
                "fl": "headline,snippet,web_url,pub_date,source",
                "api-key": self.credentials.nyt_api_key,
            },
        )
        docs = list(((data or {}).get("response") or {}).get("docs") or [])
        return [
            self._result(
                url=doc.get("web_url"),
                title=(doc.get("headline") or {}).get("main"),
                snippet=doc.get("snippet"),
                date=doc.get("pub_date"),
            )
            for doc in docs[:5]
        ]


class ExaNewsAdapter(ExaAdapter):
    """Business and wire coverage that the feeds above do not carry."""

    name = "Exa News"
    category = "news"
    num_results = 12
    include_domains = (
        "vccircle.com", "the-ken.com", "entrackr.com",
        "reuters.com", "bloomberg.com", "ft.com",
        "wsj.com", "techcrunch.com", "businessinsider.com",
    )
    source_map = {
        "vccircle.com": "VCCircle",
        "the-ken.com": "The Ken",
        "entrackr.com": "Entrackr",
        "reuters.com": "Reuters",
        "bloomberg.com": "Bloomberg",
        "ft.com": "Financial Times",
        "wsj.com": "WSJ",
    }

    def build_query(self, profile: TargetProfile) -> str:
        return f"{profile.name} {profile.company or ''} news coverage India"
