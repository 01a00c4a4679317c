"""Core contracts and shared types for the scan pipeline."""

from .contracts import (
    COMPONENT_LABELS,
    COMPONENT_MAXIMA,
    FRAME_LABELS,
    SOURCE_CATEGORIES,
    EnrichedBundle,
    GapEntry,
    LSIResult,
    ModuleResult,
    ModuleSummary,
    ScanPayload,
    ScanRun,
    ScanState,
    ScoreComponents,
    SentimentSummary,
    SourceResult,
    StatBaseline,
    StatusTimestamps,
    TargetProfile,
)

__all__ = [
    "COMPONENT_LABELS",
    "COMPONENT_MAXIMA",
    "FRAME_LABELS",
    "SOURCE_CATEGORIES",
    "EnrichedBundle",
    "GapEntry",
    "LSIResult",
    "ModuleResult",
    "ModuleSummary",
    "ScanPayload",
    "ScanRun",
    "ScanState",
    "ScoreComponents",
    "SentimentSummary",
    "SourceResult",
    "StatBaseline",
    "StatusTimestamps",
    "TargetProfile",
]
