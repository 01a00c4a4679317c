"""Canonical data contracts for the scan, enrichment and scoring pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


FRAME_LABELS = ("expert", "founder", "leader", "family", "crisis", "other")

SOURCE_CATEGORIES = ("search", "news", "social", "financial", "regulatory", "academic", "video")

COMPONENT_MAXIMA = {"c1": 20.0, "c2": 20.0, "c3": 20.0, "c4": 15.0, "c5": 15.0, "c6": 10.0}

COMPONENT_LABELS = {
    "c1": "Search Reputation",
    "c2": "Media Framing",
    "c3": "Social Backlash",
    "c4": "Elite Discourse",
    "c5": "Third-Party Validation",
    "c6": "Crisis Moat",
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


class ScanState(str, Enum):
    """Lifecycle state of a scan run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.FAILED)


class TargetProfile(BaseModel):
    """Person whose footprint is scanned. Read-only to the engine."""

    model_config = ConfigDict(frozen=True)

    name: str
    company: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    linkedin_url: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _non_empty_name(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("name is required")
        return text

    @field_validator("company", "role", "industry", "linkedin_url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip()
        return text or None

    @field_validator("keywords", mode="before")
    @classmethod
    def _clean_keywords(cls, value: Any) -> List[str]:
        return [str(item).strip() for item in list(value or []) if str(item or "").strip()]

    @property
    def name_parts(self) -> List[str]:
        return [part for part in self.name.lower().split() if part]


class SourceResult(BaseModel):
    """One mention returned by a provider adapter."""

    model_config = ConfigDict(validate_assignment=True)

    source: str
    category: str
    url: str = ""
    title: str = ""
    snippet: str = ""
    date: Optional[str] = None
    sentiment: Optional[float] = None
    frame: Optional[str] = None
    relevance: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("url", "title", "snippet", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("date", mode="before")
    @classmethod
    def _optional_date(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip()
        return text or None

    @field_validator("sentiment", mode="before")
    @classmethod
    def _bounded_sentiment(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return _clamp(value, -1.0, 1.0)

    @field_validator("relevance", mode="before")
    @classmethod
    def _bounded_relevance(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return _clamp(value, 0.0, 1.0)

    @field_validator("frame", mode="before")
    @classmethod
    def _known_frame(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        label = str(value).strip().lower()
        return label if label in FRAME_LABELS else "other"

    def identity_key(self) -> str:
        """URL when present, otherwise provider + title."""
        if self.url:
            return self.url
        return f"{self.source.strip().lower()}::{self.title.strip().lower()}"

    @property
    def sentiment_value(self) -> float:
        return float(self.sentiment) if self.sentiment is not None else 0.0

    @property
    def frame_label(self) -> str:
        return self.frame or "other"

    @property
    def is_crisis_signal(self) -> bool:
        return bool((self.metadata or {}).get("crisisSignal"))


class ModuleResult(BaseModel):
    """Combined output of one source module for one scan."""

    model_config = ConfigDict(frozen=True)

    module: str
    results: List[SourceResult] = Field(default_factory=list)
    sources_scanned: int = 0
    errors: List[str] = Field(default_factory=list)
    duration_ms: int = 0


class SentimentSummary(BaseModel):
    """Sentiment bucket percentages plus average."""

    positive: int = 0
    neutral: int = 0
    negative: int = 0
    average: float = 0.0


class EnrichedBundle(BaseModel):
    """Deduplicated, annotated results plus aggregate distributions."""

    results: List[SourceResult] = Field(default_factory=list)
    total_mentions: int = 0
    sentiment: SentimentSummary = Field(default_factory=SentimentSummary)
    frames: Dict[str, int] = Field(default_factory=lambda: {label: 0 for label in FRAME_LABELS})
    top_keywords: List[str] = Field(default_factory=list)
    crisis_signals: List[str] = Field(default_factory=list)
    summary: str = ""
    archetype_hints: List[str] = Field(default_factory=list)


class ScoreComponents(BaseModel):
    """Six bounded LSI components."""

    c1: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c1"])
    c2: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c2"])
    c3: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c3"])
    c4: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c4"])
    c5: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c5"])
    c6: float = Field(default=0.0, ge=0.0, le=COMPONENT_MAXIMA["c6"])

    def as_dict(self) -> Dict[str, float]:
        return {key: float(getattr(self, key)) for key in COMPONENT_MAXIMA}


class GapEntry(BaseModel):
    """Distance of one component from its maximum."""

    key: str
    component: str
    current: float
    max: float
    gap: float


class StatBaseline(BaseModel):
    """Sentiment mean, standard deviation and 3-sigma control limits."""

    mean: float = 0.0
    stddev: float = 0.0
    ucl: float = 0.0
    lcl: float = 0.0


class LSIResult(BaseModel):
    """Composite reputation index bundle."""

    total: float
    components: ScoreComponents
    gaps: List[GapEntry] = Field(default_factory=list)
    stats: StatBaseline = Field(default_factory=StatBaseline)


class ModuleSummary(BaseModel):
    """Per-module scan summary persisted with the payload."""

    count: int = 0
    sources_scanned: int = 0
    duration_ms: int = 0
    errors: List[str] = Field(default_factory=list)


class ScanPayload(BaseModel):
    """Final bundle persisted once a scan completes."""

    total_mentions: int = 0
    sentiment_summary: SentimentSummary = Field(default_factory=SentimentSummary)
    frame_distribution: Dict[str, int] = Field(default_factory=dict)
    top_keywords: List[str] = Field(default_factory=list)
    narrative_summary: str = ""
    archetype_hints: List[str] = Field(default_factory=list)
    crisis_signals: List[str] = Field(default_factory=list)
    mentions: List[SourceResult] = Field(default_factory=list)
    deduplicated_count: int = 0
    module_summary: Dict[str, ModuleSummary] = Field(default_factory=dict)
    lsi: LSIResult


class StatusTimestamps(BaseModel):
    """Lifecycle timestamps for a scan run."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ScanRun(BaseModel):
    """Observable scan status for polling APIs."""

    run_id: str
    target_id: str
    state: ScanState = ScanState.PENDING
    progress: int = 0
    error: Optional[str] = None
    timestamps: StatusTimestamps = Field(default_factory=StatusTimestamps)
    cancellation_requested: bool = False
