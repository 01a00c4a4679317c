"""
Video and podcast adapters
YouTube via SerpAPI, Podcast Index and Exa over podcast/talk hosts.
"""
import hashlib
import time
from typing import Dict, List, Set
from datetime import datetime, timezone

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import domain_of, first_text, is_relevant, truncate
from .providers import ExaAdapter, SerpApiAdapter


class YouTubeAdapter(SerpApiAdapter):
    """Interviews, talks and podcast appearances on YouTube."""

    name = "YouTube"
    category = "video"
    timeout_sec = 20.0
    limit = 10

    QUERY_SUFFIXES = ("interview", "talk speech", "podcast")

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        found = await self._settle(
            [(suffix, self._search_videos(profile, suffix)) for suffix in self.QUERY_SUFFIXES]
        )
        seen: Set[str] = set()
        results: List[SourceResult] = []
        for item in found:
            if item.url in seen:
                continue
            seen.add(item.url)
            results.append(item)
        return results[: self.limit]

    async def _search_videos(self, profile: TargetProfile, suffix: str) -> List[SourceResult]:
        data = await self._serp({"engine": "youtube", "search_query": f"{profile.name} {suffix}", "gl": "in"})
        results: List[SourceResult] = []
        for video in list(data.get("video_results") or [])[:4]:
            if not is_relevant(video.get("title") or "", profile.name):
                continue
            results.append(
                self._result(
                    url=str(video.get("link") or ""),
                    title=video.get("title"),
                    snippet=truncate(video.get("description"), 300),
                    date=video.get("published_date"),
                    metadata={
                        "channel": (video.get("channel") or {}).get("name"),
                        "views": video.get("views"),
                        "duration": video.get("length"),
                        "via": "serpapi-youtube",
                    },
                )
            )
        return results


class PodcastIndexAdapter(BaseAdapter):
    """
    Podcast Index feeds and episodes.

    Auth is ``sha1(key + secret + unix_time)`` sent with the key and time headers.
    """

    API_URL = "https://api.podcastindex.org/api/1.0"

    name = "Podcast Index"
    category = "video"
    timeout_sec = 8.0
    requires = ("podcast_index_key", "podcast_index_secret")

    def _auth_headers(self) -> Dict[str, str]:
        now = str(int(time.time()))
        key = str(self.credentials.podcast_index_key)
        secret = str(self.credentials.podcast_index_secret)
        digest = hashlib.sha1(f"{key}{secret}{now}".encode("utf-8")).hexdigest()
        return {"X-Auth-Key": key, "X-Auth-Date": now, "Authorization": digest}

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        headers = self._auth_headers()
        return await self._settle(
            [
                ("feeds", self._search_feeds(profile, headers)),
                ("episodes", self._search_episodes(profile, headers)),
            ]
        )

    async def _search_feeds(self, profile: TargetProfile, headers: Dict[str, str]) -> List[SourceResult]:
        results: List[SourceResult] = []
        feeds = await self._get_json(
            f"{self.API_URL}/search/byterm",
            params={"q": profile.name, "max": 10, "clean": ""},
            headers=headers,
        )
        for feed in list((feeds or {}).get("feeds") or [])[:3]:
            if not is_relevant(feed.get("title") or "", profile.name):
                continue
            results.append(
                self._result(
                    url=first_text(feed.get("link"), feed.get("url")),
                    title=feed.get("title"),
                    snippet=truncate(feed.get("description"), 300),
                    metadata={
                        "episodeCount": feed.get("episodeCount"),
                        "language": feed.get("language"),
                        "itunesId": feed.get("itunesId"),
                    },
                )
            )
        return results

    async def _search_episodes(self, profile: TargetProfile, headers: Dict[str, str]) -> List[SourceResult]:
        results: List[SourceResult] = []
        episodes = await self._get_json(
            f"{self.API_URL}/search/episode/bytitle",
            params={"q": profile.name, "max": 8, "clean": ""},
            headers=headers,
        )
        for episode in list((episodes or {}).get("items") or [])[:5]:
            if not is_relevant(episode.get("title") or "", profile.name):
                continue
            published = episode.get("datePublished")
            results.append(
                self._result(
                    url=first_text(episode.get("link"), episode.get("enclosureUrl")),
                    title=episode.get("title"),
                    snippet=truncate(episode.get("description"), 300),
                    date=datetime.fromtimestamp(float(published), tz=timezone.utc).isoformat() if published else None,
                    metadata={"feedTitle": episode.get("feedTitle"), "duration": episode.get("duration")},
                )
            )
        return results


class ExaVideoAdapter(ExaAdapter):
    name = "Exa Video/Podcasts"
    category = "video"
    num_results = 10
    filter_relevant = True
    max_items = 8
    include_domains = (
        "ted.com", "open.spotify.com", "ivmpodcasts.com",
        "soundcloud.com", "anchor.fm", "buzzsprout.com",
        "iheartradio.com", "podbean.com", "simplecast.com",
    )
    source_map = {
        "ted.com": "TED/TEDx",
        "open.spotify.com": "Spotify Podcasts",
        "ivmpodcasts.com": "IVM Podcasts",
        "soundcloud.com": "SoundCloud",
    }

    def build_query(self, profile: TargetProfile) -> str:
        return f"{profile.name} podcast interview talk speech keynote"

    def source_for(self, url: str) -> str:
        domain = domain_of(url)
        return self.source_map.get(domain) or f"Podcast ({domain})"
