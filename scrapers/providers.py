"""
Provider-family adapters.

SerpAPI and Exa back adapters in several domains; the request and parse
logic for each family lives here and concrete adapters only supply the
query and result labelling.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import domain_of, first_text, is_relevant, truncate


class SerpApiAdapter(BaseAdapter):
    """Adapter over the SerpAPI search endpoint (Google, Scholar, YouTube engines)."""

    SEARCH_URL = "https://serpapi.com/search"

    requires = ("serpapi_key",)
    timeout_sec = 10.0
    subquery_timeout_sec = 8.0
    limit: int = 8

    async def _serp(self, params: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(params)
        query["api_key"] = self.credentials.serpapi_key
        query.setdefault("num", str(self.limit))
        data = await self._get_json(self.SEARCH_URL, params=query)
        if not isinstance(data, dict):
            raise ValueError("SerpAPI response is not an object")
        return data

    def _organic(
        self,
        data: Dict[str, Any],
        *,
        source: Optional[str] = None,
        limit: Optional[int] = None,
        extra_metadata: Optional[Dict[str, Any]] = None,
    ) -> List[SourceResult]:
        items: List[SourceResult] = []
        for row in list(data.get("organic_results") or [])[: limit or self.limit]:
            metadata = {"position": row.get("position"), "displayedLink": row.get("displayed_link")}
            metadata.update(extra_metadata or {})
            items.append(
                self._result(
                    source=source or self.name,
                    url=row.get("link"),
                    title=row.get("title"),
                    snippet=row.get("snippet"),
                    date=row.get("date"),
                    metadata=metadata,
                )
            )
        return items


class SiteSearchAdapter(SerpApiAdapter):
    """
    ``site:<domain> "<subject>"`` Google searches over a fixed set of sites.

    ``sites`` pairs a display label with a domain. The person is always
    searched; the organisation too when ``include_company`` is set, capped
    at ``company_limit`` hits per site.
    """

    sites: Sequence[Tuple[str, str]] = ()
    per_site: int = 4
    include_company: bool = True
    company_limit: int = 2

    def _subjects(self, profile: TargetProfile) -> List[Tuple[str, int]]:
        subjects = [(profile.name, self.per_site)]
        if self.include_company and profile.company and profile.company != profile.name:
            subjects.append((profile.company, self.company_limit))
        return subjects

    def site_metadata(self, label: str) -> Dict[str, Any]:
        return {"via": "serpapi"}

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        return await self._settle(
            [
                (f"{label} / {subject}", self._search_site(label, site, subject, limit))
                for label, site in self.sites
                for subject, limit in self._subjects(profile)
            ]
        )

    async def _search_site(self, label: str, site: str, subject: str, limit: int) -> List[SourceResult]:
        data = await self._serp({"engine": "google", "q": f'site:{site} "{subject}"', "num": "5"})
        return self._organic(data, source=label, limit=limit, extra_metadata=self.site_metadata(label))


class ExaAdapter(BaseAdapter):
    """Adapter over Exa neural/keyword search, optionally restricted to domains."""

    SEARCH_URL = "https://api.exa.ai/search"

    requires = ("exa_api_key",)
    timeout_sec = 10.0
    num_results: int = 8
    search_type: str = "neural"
    include_domains: Sequence[str] = ()
    source_map: Dict[str, str] = {}
    filter_relevant: bool = False
    max_items: Optional[int] = None

    def build_query(self, profile: TargetProfile) -> str:
        return f"{profile.name} {profile.company or ''} reputation".strip()

    def source_for(self, url: str) -> str:
        domain = domain_of(url)
        return self.source_map.get(domain) or domain or self.name

    def extra_metadata(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {"via": "exa", "domain": domain_of(row.get("url") or "")}

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        payload: Dict[str, Any] = {
            "query": self.build_query(profile),
            "numResults": self.num_results,
            "useAutoprompt": self.search_type == "neural",
            "type": self.search_type,
            "contents": {"text": {"maxCharacters": 400}},
        }
        if self.include_domains:
            payload["includeDomains"] = list(self.include_domains)

        data = await self._post_json(
            self.SEARCH_URL,
            payload=payload,
            headers={"x-api-key": str(self.credentials.exa_api_key)},
        )
        rows = list((data or {}).get("results") or [])

        results: List[SourceResult] = []
        for row in rows:
            url = str(row.get("url") or "")
            title = str(row.get("title") or "")
            text = str(row.get("text") or "")
            if self.filter_relevant and not is_relevant(first_text(title, text), profile.name):
                continue
            results.append(
                self._result(
                    source=self.source_for(url),
                    url=url,
                    title=title,
                    snippet=truncate(text, 400),
                    date=row.get("publishedDate"),
                    metadata=self.extra_metadata(row),
                )
            )
        if self.max_items is not None:
            results = results[: self.max_items]
        return results
