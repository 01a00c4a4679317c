"""
Source Modules
Domain-grouped adapter sets with a settle-all join.
"""
import asyncio
import time
from typing import Dict, List, Optional, Sequence
import logging

import httpx

from config import Settings, get_settings
from core import ModuleResult, SourceResult, TargetProfile
from scrapers import (
    AdapterOutcome,
    BaseAdapter,
    EnforcementNewsAdapter,
    ExaFinancialAdapter,
    ExaNewsAdapter,
    ExaSearchAdapter,
    ExaVideoAdapter,
    FinancialProfilesAdapter,
    GitHubAdapter,
    GoogleScholarAdapter,
    GoogleWebAdapter,
    GuardianAdapter,
    HackerNewsAdapter,
    LinkedInAdapter,
    NewsAPIAdapter,
    NYTimesAdapter,
    PodcastIndexAdapter,
    RedditAdapter,
    RegulatorySitesAdapter,
    RSSFeedsAdapter,
    SemanticScholarAdapter,
    TwitterAdapter,
    WikipediaAdapter,
    YouTubeAdapter,
)


logger = logging.getLogger(__name__)


MODULE_ORDER = ("search", "news", "social", "financial", "regulatory", "academic", "video")

MODULE_ADAPTERS: Dict[str, Sequence[type]] = {
    "search": (GoogleWebAdapter, WikipediaAdapter, HackerNewsAdapter, ExaSearchAdapter),
    "news": (RSSFeedsAdapter, NewsAPIAdapter, GuardianAdapter, NYTimesAdapter, ExaNewsAdapter),
    "social": (TwitterAdapter, RedditAdapter, GitHubAdapter, LinkedInAdapter),
    "financial": (FinancialProfilesAdapter, ExaFinancialAdapter),
    "regulatory": (RegulatorySitesAdapter, EnforcementNewsAdapter),
    "academic": (SemanticScholarAdapter, GoogleScholarAdapter),
    "video": (YouTubeAdapter, PodcastIndexAdapter, ExaVideoAdapter),
}


class SourceModule:
    """
    One domain's adapters, run concurrently.

    ``scan`` never raises: wrapper-reported errors and anything that escapes
    an adapter are both recorded as ``"<adapter>: <message>"`` entries.
    """

    def __init__(self, name: str, adapters: Sequence[BaseAdapter]):
        self.name = name
        self.adapters = list(adapters)

    async def scan(self, profile: TargetProfile) -> ModuleResult:
        started = time.monotonic()
        outcomes = await asyncio.gather(
            *(adapter.run(profile) for adapter in self.adapters),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        errors: List[str] = []
        scanned = 0
        for adapter, outcome in zip(self.adapters, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(f"[{self.name}] adapter {adapter.name} escaped its wrapper: {outcome}")
                errors.append(f"{adapter.name}: {outcome}")
                scanned += 1
                continue
            if not isinstance(outcome, AdapterOutcome):
                errors.append(f"{adapter.name}: unexpected outcome {type(outcome).__name__}")
                scanned += 1
                continue
            if outcome.skipped:
                continue
            scanned += 1
            if outcome.error:
                errors.append(outcome.error)
            results.extend(outcome.results)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[{self.name}] {len(results)} results from {scanned}/{len(self.adapters)} adapters "
            f"in {duration_ms}ms ({len(errors)} errors)"
        )
        return ModuleResult(
            module=self.name,
            results=results,
            sources_scanned=scanned,
            errors=errors,
            duration_ms=duration_ms,
        )

    async def close(self):
        for adapter in self.adapters:
            await adapter.close()

    def __repr__(self) -> str:
        return f"SourceModule(name={self.name!r}, adapters={len(self.adapters)})"


def build_source_modules(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SourceModule]:
    """
    Build the seven domain modules in fixed order.

    Every adapter receives the same injected credentials and, when given,
    the same shared HTTP client.
    """
    settings = settings or get_settings()
    modules: List[SourceModule] = []
    for module_name in MODULE_ORDER:
        adapters = [
            adapter_cls(settings.providers, client=client, user_agent=settings.scan.user_agent)
            for adapter_cls in MODULE_ADAPTERS[module_name]
        ]
        modules.append(SourceModule(module_name, adapters))
    return modules
