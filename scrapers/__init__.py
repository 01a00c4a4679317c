"""
Provider Adapters
"""
from .base import AdapterOutcome, BaseAdapter, resilient
from .providers import ExaAdapter, SerpApiAdapter, SiteSearchAdapter
from .search import ExaSearchAdapter, GoogleWebAdapter, HackerNewsAdapter, WikipediaAdapter
from .news import ExaNewsAdapter, GuardianAdapter, NewsAPIAdapter, NYTimesAdapter, RSSFeedsAdapter
from .social import GitHubAdapter, LinkedInAdapter, RedditAdapter, TwitterAdapter
from .financial import ExaFinancialAdapter, FinancialProfilesAdapter
from .regulatory import EnforcementNewsAdapter, RegulatorySitesAdapter
from .academic import GoogleScholarAdapter, SemanticScholarAdapter
from .video import ExaVideoAdapter, PodcastIndexAdapter, YouTubeAdapter

__all__ = [
    # Base
    "AdapterOutcome",
    "BaseAdapter",
    "resilient",
    "ExaAdapter",
    "SerpApiAdapter",
    "SiteSearchAdapter",
    # Search
    "GoogleWebAdapter",
    "WikipediaAdapter",
    "HackerNewsAdapter",
    "ExaSearchAdapter",
    # News
    "RSSFeedsAdapter",
    "NewsAPIAdapter",
    "GuardianAdapter",
    "NYTimesAdapter",
    "ExaNewsAdapter",
    # Social
    "TwitterAdapter",
    "RedditAdapter",
    "GitHubAdapter",
    "LinkedInAdapter",
    # Financial
    "FinancialProfilesAdapter",
    "ExaFinancialAdapter",
    # Regulatory
    "RegulatorySitesAdapter",
    "EnforcementNewsAdapter",
    # Academic
    "SemanticScholarAdapter",
    "GoogleScholarAdapter",
    # Video
    "YouTubeAdapter",
    "PodcastIndexAdapter",
    "ExaVideoAdapter",
]
