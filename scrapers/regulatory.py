"""
Regulatory adapters
Securities, banking and company-registry records via Google site search,
plus enforcement-agency news via Exa keyword search.
"""
from typing import Any, Dict

from core import TargetProfile

from .providers import ExaAdapter, SiteSearchAdapter


class RegulatorySitesAdapter(SiteSearchAdapter):
    """
    SEBI, RBI and MCA records. Each hit carries ``regulatoryBody`` so the
    scoring engine can pick regulator mentions out of the regulatory bucket.
    """

    name = "Regulatory Registries"
    category = "regulatory"
    timeout_sec = 20.0
    sites = (
        ("SEBI", "sebi.gov.in"),
        ("RBI", "rbi.org.in"),
        ("MCA India", "mca.gov.in"),
    )

    def site_metadata(self, label: str) -> Dict[str, Any]:
        return {"regulatoryBody": label, "via": "serpapi"}


class EnforcementNewsAdapter(ExaAdapter):
    """Investigation coverage (ED, CBI, SFIO). Every hit is a crisis signal."""

    name = "ED/CBI/SFIO (Enforcement)"
    category = "regulatory"
    num_results = 6
    search_type = "keyword"
    filter_relevant = True
    max_items = 4

    def build_query(self, profile: TargetProfile) -> str:
        return (
            f"{profile.name} {profile.company or ''} "
            "enforcement directorate ED CBI SFIO probe investigation"
        )

    def source_for(self, url: str) -> str:
        return self.name

    def extra_metadata(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {"crisisSignal": True, "via": "exa"}
