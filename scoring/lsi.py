"""
LSI Scoring Engine
Pure, deterministic scoring of an EnrichedBundle into six bounded
components, a remediation gap list and sentiment control limits.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence

import numpy as np

from core import (
    COMPONENT_LABELS,
    COMPONENT_MAXIMA,
    EnrichedBundle,
    GapEntry,
    LSIResult,
    ScoreComponents,
    SourceResult,
    StatBaseline,
)


TIER1_NEWS_SOURCES = frozenset({
    "Economic Times",
    "Business Standard",
    "Livemint",
    "Bloomberg",
    "Reuters",
    "The Guardian",
    "New York Times",
    "Financial Times",
})
AUTHORITY_NEWS_SOURCES = frozenset({"Bloomberg", "Reuters", "FT", "WSJ"})
AUTHORITY_FINANCIAL_SOURCES = frozenset({"Crunchbase", "PitchBook", "Tracxn"})
REGULATOR_SOURCES = frozenset({"SEBI", "RBI"})
PROFESSIONAL_FRAMES = frozenset({"expert", "founder", "leader"})


def _round_to(value: float, places: int) -> float:
    """Half-up rounding, so 0.05 -> 0.1 and -0.05 -> -0.0."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def _bounded(key: str, value: float) -> float:
    return _round_to(max(0.0, min(COMPONENT_MAXIMA[key], value)), 1)


def _share(items: Sequence[SourceResult], predicate: Callable[[SourceResult], bool]) -> float:
    """Fraction of items matching; an empty bucket has a neutral denominator of 1."""
    return sum(1 for item in items if predicate(item)) / max(len(items), 1)


def _by_category(results: Sequence[SourceResult], category: str) -> List[SourceResult]:
    return [item for item in results if item.category == category]


def _source_contains(results: Sequence[SourceResult], needle: str) -> List[SourceResult]:
    return [item for item in results if needle in item.source.lower()]


def is_regulatory_crisis(item: SourceResult) -> bool:
    return item.is_crisis_signal or "ed/cbi" in item.source.lower() or item.source in REGULATOR_SOURCES


def score_components(results: Sequence[SourceResult]) -> ScoreComponents:
    search = _by_category(results, "search")
    news = _by_category(results, "news")
    social = _by_category(results, "social")
    academic = _by_category(results, "academic")
    video = _by_category(results, "video")
    financial = _by_category(results, "financial")
    google = _source_contains(results, "google")

    # C1 Search Reputation
    c1 = (
        _share(google, lambda r: r.sentiment_value > 0.2) * 10
        + _share(search, lambda r: r.frame_label in PROFESSIONAL_FRAMES) * 10
    )

    # C2 Media Framing
    tier1 = sum(1 for item in news if item.source in TIER1_NEWS_SOURCES)
    c2 = (
        _share(news, lambda r: r.frame_label == "expert") * 8
        + _share(news, lambda r: r.sentiment_value > 0.1) * 6
        + min(tier1 * 1.5, 6.0)
    )

    # C3 Social Backlash, inverted: 20 means no backlash
    negative_social = sum(1 for item in social if item.sentiment_value < -0.3)
    crisis_social = sum(1 for item in social if item.frame_label == "crisis")
    c3 = max(20.0 - (negative_social + crisis_social * 2) / max(len(social), 1) * 20, 0.0)

    # C4 Elite Discourse
    podcasts = [item for item in video if "podcast" in item.source.lower() or item.source == "Podcast Index"]
    linkedin = _source_contains(results, "linkedin")
    c4 = min(len(academic) * 2, 6.0) + min(len(podcasts) * 1.5, 5.0) + min(len(linkedin) * 1.5, 4.0)

    # C5 Third-Party Validation
    authority = (
        sum(1 for item in news if item.source in AUTHORITY_NEWS_SOURCES)
        + len(academic)
        + sum(1 for item in financial if item.source in AUTHORITY_FINANCIAL_SOURCES)
    )
    c5 = min(authority * 2.5, 15.0)

    # C6 Crisis Moat
    crisis_frames = sum(1 for item in results if item.frame_label == "crisis")
    crisis_flags = sum(1 for item in results if is_regulatory_crisis(item))
    c6 = max(10.0 - (crisis_frames * 2 + crisis_flags * 3) / 10, 0.0)

    raw = {"c1": c1, "c2": c2, "c3": c3, "c4": c4, "c5": c5, "c6": c6}
    return ScoreComponents(**{key: _bounded(key, value) for key, value in raw.items()})


def gap_analysis(components: ScoreComponents) -> List[GapEntry]:
    """Distance to maximum per component, largest first; ties keep component order."""
    gaps = [
        GapEntry(
            key=key,
            component=COMPONENT_LABELS[key],
            current=value,
            max=COMPONENT_MAXIMA[key],
            gap=_round_to(COMPONENT_MAXIMA[key] - value, 1),
        )
        for key, value in components.as_dict().items()
    ]
    return sorted(gaps, key=lambda entry: entry.gap, reverse=True)


def sentiment_baseline(results: Sequence[SourceResult]) -> StatBaseline:
    """Mean, population standard deviation and mean +/- 3 sigma of sentiment."""
    if not results:
        return StatBaseline()
    values = np.array([item.sentiment_value for item in results], dtype=float)
    mean = float(np.mean(values))
    stddev = float(np.std(values))
    return StatBaseline(
        mean=_round_to(mean, 2),
        stddev=_round_to(stddev, 2),
        ucl=_round_to(mean + 3 * stddev, 2),
        lcl=_round_to(mean - 3 * stddev, 2),
    )


def calculate_lsi(bundle: EnrichedBundle) -> LSIResult:
    """
    Score an enriched bundle.

    With zero results every share has a denominator of 1, so the result is
    the fixed baseline: C3 = 20 and C6 = 10 (nothing negative found), all
    other components 0.
    """
    results = list(bundle.results)
    components = score_components(results)
    total = min(_round_to(sum(components.as_dict().values()), 1), 100.0)
    return LSIResult(
        total=total,
        components=components,
        gaps=gap_analysis(components),
        stats=sentiment_baseline(results),
    )


def component_breakdown(result: LSIResult) -> Dict[str, Dict[str, float]]:
    """Label/current/max view of the components for display."""
    return {
        key: {"label": COMPONENT_LABELS[key], "current": value, "max": COMPONENT_MAXIMA[key]}
        for key, value in result.components.as_dict().items()
    }
