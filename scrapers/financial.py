"""
Financial adapters
Funding and company-profile databases located through SerpAPI and Exa.
"""
from core import TargetProfile

from .providers import ExaAdapter, SiteSearchAdapter


FINANCIAL_SOURCE_MAP = {
    "crunchbase.com": "Crunchbase",
    "tracxn.com": "Tracxn",
    "wellfound.com": "Wellfound/AngelList",
    "pitchbook.com": "PitchBook",
    "dealstreetasia.com": "DealStreetAsia",
}


class FinancialProfilesAdapter(SiteSearchAdapter):
    name = "Financial Profiles"
    category = "financial"
    timeout_sec = 12.0
    sites = (
        ("Crunchbase", "crunchbase.com"),
        ("Tracxn", "tracxn.com"),
        ("PitchBook", "pitchbook.com"),
    )
    per_site = 3


class ExaFinancialAdapter(ExaAdapter):
    name = "Exa Financial"
    category = "financial"
    include_domains = tuple(FINANCIAL_SOURCE_MAP)
    source_map = FINANCIAL_SOURCE_MAP

    def build_query(self, profile: TargetProfile) -> str:
        return f"{profile.name} {profile.company or ''} funding investment startup profile"
