"""
Academic adapters
Semantic Scholar author search and Google Scholar via SerpAPI.
"""
from typing import List
from urllib.parse import quote

from core import SourceResult, TargetProfile

from .base import BaseAdapter
from .helpers import is_relevant
from .providers import SerpApiAdapter


class SemanticScholarAdapter(BaseAdapter):
    """Author profiles and their top papers (no key required)."""

    AUTHOR_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/author/search"
    FIELDS = "name,paperCount,citationCount,hIndex,papers.title,papers.year,papers.citationCount,papers.externalIds"

    name = "Semantic Scholar"
    category = "academic"
    timeout_sec = 8.0

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._get_json(
            self.AUTHOR_SEARCH_URL,
            params={"query": profile.name, "fields": self.FIELDS, "limit": 3},
        )
        results: List[SourceResult] = []
        for author in list((data or {}).get("data") or [])[:2]:
            author_name = str(author.get("name") or "")
            if not is_relevant(author_name, profile.name):
                continue
            results.append(
                self._result(
                    url=f"https://www.semanticscholar.org/author/{quote(author_name)}/{author.get('authorId')}",
                    title=f"{author_name} - Research Profile",
                    snippet=(
                        f"{author.get('paperCount') or 0} papers | "
                        f"{author.get('citationCount') or 0} citations | "
                        f"h-index: {author.get('hIndex') if author.get('hIndex') is not None else 'N/A'}"
                    ),
                    metadata={
                        "authorId": author.get("authorId"),
                        "paperCount": author.get("paperCount"),
                        "citationCount": author.get("citationCount"),
                        "hIndex": author.get("hIndex"),
                    },
                )
            )
            for paper in list(author.get("papers") or [])[:3]:
                if not paper.get("title"):
                    continue
                doi = (paper.get("externalIds") or {}).get("DOI")
                year = paper.get("year")
                results.append(
                    self._result(
                        url=f"https://doi.org/{doi}" if doi else f"https://www.semanticscholar.org/paper/{paper.get('paperId') or ''}",
                        title=paper.get("title"),
                        snippet=f"Academic paper ({year or 'n/d'}) - {paper.get('citationCount') or 0} citations",
                        date=str(year) if year else None,
                        metadata={"citationCount": paper.get("citationCount"), "doi": doi},
                    )
                )
        return results


class GoogleScholarAdapter(SerpApiAdapter):
    name = "Google Scholar"
    category = "academic"
    timeout_sec = 12.0

    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        data = await self._serp({"engine": "google_scholar", "q": f'"{profile.name}"', "num": "8"})
        results: List[SourceResult] = []

        author = data.get("author_info")
        if isinstance(author, dict):
            table = ((author.get("cited_by") or {}).get("table") or [{}])
            citations = ((table[0] if table else {}).get("citations") or {}).get("all", 0)
            results.append(
                self._result(
                    url=f"https://scholar.google.com/citations?user={author.get('author_id') or ''}",
                    title=f"{profile.name} - Google Scholar Profile",
                    snippet=f"{author.get('affiliations') or ''} | {citations} total citations",
                    metadata={"authorId": author.get("author_id"), "interests": author.get("interests")},
                )
            )

        for paper in list(data.get("organic_results") or [])[:5]:
            publication = paper.get("publication_info") or {}
            results.append(
                self._result(
                    url=paper.get("link"),
                    title=paper.get("title"),
                    snippet=paper.get("snippet"),
                    date=publication.get("summary"),
                    metadata={
                        "citedBy": ((paper.get("inline_links") or {}).get("cited_by") or {}).get("total"),
                        "authors": publication.get("authors"),
                    },
                )
            )
        return results
