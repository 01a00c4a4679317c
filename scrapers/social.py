"""
Social adapters
Twitter/X recent search, Reddit, GitHub user profiles and LinkedIn profiles.
"""
from datetime import datetime, timezone
from typing import Dict, List
from urllib.parse import quote

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import is_relevant, truncate
from .providers import SiteSearchAdapter


class TwitterAdapter(BaseAdapter):
    """Recent tweets mentioning the person or their organisation (API v2)."""

    SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"

    name = "Twitter/X"
    category = "social"
    timeout_sec = 8.0
    requires = ("x_bearer_token",)

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        query = f'"{profile.name}"'
        if profile.company:
            query += f' OR "{profile.company}"'
        query += " -is:retweet lang:en"

        data = await self._get_json(
            self.SEARCH_URL,
            params={
                "query": query,
                "max_results": 20,
                "tweet.fields": "created_at,public_metrics,author_id,text",
                "expansions": "author_id",
                "user.fields": "name,username,verified",
            },
            headers={"Authorization": f"Bearer {self.credentials.x_bearer_token}"},
        )
        users: Dict[str, Dict] = {
            str(user.get("id")): user for user in list(((data or {}).get("includes") or {}).get("users") or [])
        }

        results: List[SourceResult] = []
        for tweet in list((data or {}).get("data") or [])[:10]:
            author = users.get(str(tweet.get("author_id") or ""), {})
            username = author.get("username") or "i"
            metrics = tweet.get("public_metrics") or {}
            results.append(
                self._result(
                    url=f"https://twitter.com/{username}/status/{tweet.get('id')}",
                    title=f"Tweet by @{author.get('username') or 'user'}",
                    snippet=tweet.get("text"),
                    date=tweet.get("created_at"),
                    metadata={
                        "likes": metrics.get("like_count"),
                        "retweets": metrics.get("retweet_count"),
                        "replies": metrics.get("reply_count"),
                        "authorName": author.get("name"),
                    },
                )
            )
        return results


class RedditAdapter(BaseAdapter):
    """Keyless Reddit search across business and startup subreddits."""

    SUBREDDITS = "india+IndiaInvestments+IndianBusiness+startups+IndiaStartups+BusinessIndia"

    name = "Reddit"
    category = "social"
    timeout_sec = 8.0

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            f"https://www.reddit.com/r/{self.SUBREDDITS}/search.json",
            params={"q": f'"{profile.name}"', "restrict_sr": 1, "sort": "relevance", "limit": 10, "t": "year"},
        )
        posts = [
            child.get("data") or {}
            for child in list(((data or {}).get("data") or {}).get("children") or [])
        ]
        posts = [post for post in posts if is_relevant(post.get("title") or "", profile.name)]

        results: List[SourceResult] = []
        for post in posts[:6]:
            created = post.get("created_utc")
            results.append(
                self._result(
                    source=f"Reddit r/{post.get('subreddit')}",
                    url=f"https://reddit.com{post.get('permalink') or post.get('url') or ''}",
                    title=post.get("title"),
                    snippet=truncate(post.get("selftext"), 300),
                    date=datetime.fromtimestamp(float(created), tz=timezone.utc).isoformat() if created else None,
                    metadata={"score": post.get("score"), "subreddit": post.get("subreddit")},
                )
            )
        return results


class GitHubAdapter(BaseAdapter):
    """
    GitHub user search followed by a profile lookup per candidate.

    Works without a token; ``github_token`` only lifts rate limits.
    """

    API_URL = "https://api.github.com"

    name = "GitHub"
    category = "social"
    timeout_sec = 6.0

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.credentials.has("github_token"):
            headers["Authorization"] = f"token {self.credentials.github_token}"
        return headers

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            f"{self.API_URL}/search/users",
            params={"q": profile.name, "per_page": 3},
            headers=self._headers(),
        )
        results: List[SourceResult] = []
        for user in list((data or {}).get("items") or [])[:2]:
            login = str(user.get("login") or "")
            if not login:
                continue
            detail = await self._get_json(f"{self.API_URL}/users/{quote(login)}", headers=self._headers())
            display = detail.get("name") or login
            if not is_relevant(display, profile.name):
                continue
            results.append(
                self._result(
                    url=detail.get("html_url") or f"https://github.com/{login}",
                    title=f"{display} on GitHub",
                    snippet=detail.get("bio"),
                    metadata={
                        "repos": detail.get("public_repos"),
                        "followers": detail.get("followers"),
                        "company": detail.get("company"),
                        "location": detail.get("location"),
                    },
                )
            )
        return results


class LinkedInAdapter(SiteSearchAdapter):
    """Public LinkedIn profile pages located through Google site search."""

    name = "LinkedIn"
    category = "social"
    sites = (("LinkedIn", "linkedin.com/in"),)
    per_site = 3
    include_company = False

    def site_metadata(self, label: str) -> Dict:
        return {"via": "serpapi", "profile": True}
