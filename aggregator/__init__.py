"""
Aggregator Module
"""
from .result_aggregator import (
    DEFAULT_RESULT_CAP,
    AggregatedResults,
    aggregate,
    dedupe_results,
    print_module_summary,
    rank_results,
)

__all__ = [
    "DEFAULT_RESULT_CAP",
    "AggregatedResults",
    "aggregate",
    "dedupe_results",
    "print_module_summary",
    "rank_results",
]
