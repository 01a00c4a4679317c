"""
Scoring Module
LSI composite reputation index
"""
from .lsi import (
    calculate_lsi,
    component_breakdown,
    gap_analysis,
    score_components,
    sentiment_baseline,
)

__all__ = [
    "calculate_lsi",
    "component_breakdown",
    "gap_analysis",
    "score_components",
    "sentiment_baseline",
]
