"""
Enrichment Pipeline
Batched LLM annotation (sentiment, frame, relevance) plus the derived
distributions, keywords, crisis signals, archetype hints and narrative.
"""

from __future__ import annotations

import asyncio
import json
import math
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from aggregator import rank_results
from config import Settings, get_settings
from core import FRAME_LABELS, EnrichedBundle, SentimentSummary, SourceResult, TargetProfile
from utils.exceptions import EnrichmentParseError, LLMError

from .llm import BaseLLM, Message, get_task_llm


logger = logging.getLogger(__name__)


DEFAULT_BATCH_SIZE = 20
POSITIVE_THRESHOLD = 0.2
NEGATIVE_THRESHOLD = -0.2
KEYWORD_LIMIT = 15
CRISIS_SIGNAL_LIMIT = 5
ARCHETYPE_CONTEXT_SIZE = 10

_TOKEN_RE = re.compile(r"\b[a-z]{4,}\b")
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "shall", "that", "this", "these", "those",
    "said", "says", "told", "new", "also", "its", "his", "her", "their",
    "about", "after", "into", "over", "more", "than", "they", "them", "what",
    "when", "which", "while", "where", "there", "here", "your", "just",
})

ARCHETYPE_FALLBACK: Dict[str, List[str]] = {
    "expert": ["Sage", "Expert Authority"],
    "founder": ["Creator", "Ecosystem Builder"],
    "leader": ["Ruler", "Visionary Leader"],
    "family": ["Caregiver"],
    "crisis": ["Rebel"],
    "other": ["Everyman"],
}

CLASSIFY_PROMPT = """Analyze each item below about {name}. For each item return an entry with:
- "idx": the index number shown in brackets
- "sentiment": float from -1.0 (very negative) to 1.0 (very positive), 0 = neutral
- "frame": one of "expert" (expertise/authority), "founder" (entrepreneurial/builder), "leader" (leadership/visionary), "family" (personal/legacy), "crisis" (scandal/legal/controversy), "other"
- "relevance": float 0-1, how relevant the item is to the person's reputation

Return ONLY a JSON object of the form {{"items": [...]}}, no other text.

Items to analyze:
{items}"""

ARCHETYPE_PROMPT = """Based on these search results about {subject}, suggest 2-3 Jungian archetypes that best match their public persona. Choose from: Sage, Hero, Ruler, Creator, Caregiver, Explorer, Rebel, Lover, Jester, Everyman, Magician, Innocent. Also suggest 1-2 professional archetypes such as: Maverick CEO, Ecosystem Builder, Technical Visionary, Industry Transformer, Academic Practitioner.

Results:
{results}

Return ONLY a JSON object: {{"archetypes": ["archetype1", "archetype2"], "rationale": "brief reason"}}"""

SUMMARY_PROMPT = """Write a 3-sentence executive summary of the reputation profile for {subject}.

Data: {count} total mentions | Sentiment: {positive}% positive, {negative}% negative | Primary frame: {frame} | Context: {tone}{crisis}.

Top sources: {sources}.

Be specific, professional and data-driven. No fluff."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _pct(count: int, total: int) -> int:
    return _round_half_up(count / max(total, 1) * 100)


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", (text or "").strip()).strip()


def render_batch(batch: Sequence[SourceResult]) -> str:
    """``[idx] Source / Title / Text`` blocks separated by rules."""
    return "\n\n---\n\n".join(
        f"[{idx}] Source: {item.source}\nTitle: {item.title}\nText: {item.snippet}"
        for idx, item in enumerate(batch)
    )


def parse_classification(text: str, batch_len: int) -> List[Tuple[int, float, str, float]]:
    """
    Parse a classification response into ``(idx, sentiment, frame, relevance)`` rows.

    Accepts a bare JSON array or an object wrapping it under ``items`` or
    ``results``; markdown code fences are ignored. Rows whose ``idx`` falls
    outside the batch are dropped. Anything else malformed raises
    EnrichmentParseError so the caller can degrade the whole batch.
    """
    raw = _strip_fences(text)
    if not raw:
        raise EnrichmentParseError("empty classification response")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        match = re.search(r"[\[{][\s\S]*[\]}]", raw)
        if not match:
            raise EnrichmentParseError("classification response is not JSON", {"head": raw[:80]})
        try:
            parsed = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise EnrichmentParseError(f"classification response is not JSON: {e}", {"head": raw[:80]})

    if isinstance(parsed, dict):
        parsed = parsed.get("items", parsed.get("results"))
    if not isinstance(parsed, list):
        raise EnrichmentParseError("classification response has no item array")

    rows: List[Tuple[int, float, str, float]] = []
    for entry in parsed:
        if not isinstance(entry, dict):
            raise EnrichmentParseError("classification entry is not an object")
        try:
            idx = int(entry["idx"])
            sentiment = float(entry.get("sentiment", 0.0))
            relevance = float(entry.get("relevance", 0.0))
        except (KeyError, TypeError, ValueError) as e:
            raise EnrichmentParseError(f"malformed classification entry: {e}", {"entry": entry})
        if not 0 <= idx < batch_len:
            continue
        frame = str(entry.get("frame") or "other").strip().lower()
        rows.append((idx, sentiment, frame, relevance))
    return rows


def sentiment_summary(results: Sequence[SourceResult]) -> SentimentSummary:
    values = [item.sentiment_value for item in results]
    positive = sum(1 for value in values if value > POSITIVE_THRESHOLD)
    negative = sum(1 for value in values if value < NEGATIVE_THRESHOLD)
    neutral = len(values) - positive - negative
    average = sum(values) / max(len(values), 1)
    return SentimentSummary(
        positive=_pct(positive, len(values)),
        neutral=_pct(neutral, len(values)),
        negative=_pct(negative, len(values)),
        average=round(average, 2),
    )


def frame_counts(results: Sequence[SourceResult]) -> Dict[str, int]:
    counts = {label: 0 for label in FRAME_LABELS}
    for item in results:
        counts[item.frame_label] += 1
    return counts


def frame_distribution(results: Sequence[SourceResult]) -> Dict[str, int]:
    counts = frame_counts(results)
    total = sum(counts.values())
    return {label: _pct(count, total) for label, count in counts.items()}


def dominant_frame(results: Sequence[SourceResult]) -> str:
    """Most common frame; ties resolve in frame-label order, empty input is "other"."""
    if not results:
        return "other"
    counts = frame_counts(results)
    return max(FRAME_LABELS, key=lambda label: (counts[label], -FRAME_LABELS.index(label)))


def extract_keywords(
    results: Sequence[SourceResult],
    profile: TargetProfile,
    limit: int = KEYWORD_LIMIT,
) -> List[str]:
    """Most frequent 4+ letter tokens, minus stop-words and the target's own name."""
    excluded = STOPWORDS | set(profile.name_parts)
    counts: Counter = Counter()
    for item in results:
        for token in _TOKEN_RE.findall(f"{item.title} {item.snippet}".lower()):
            if token not in excluded:
                counts[token] += 1
    # Counter preserves insertion order, so equal counts keep first occurrence
    return [word for word, _ in counts.most_common(limit)]


def crisis_signals(results: Sequence[SourceResult], limit: int = CRISIS_SIGNAL_LIMIT) -> List[str]:
    flagged = [item for item in results if item.frame == "crisis" or item.is_crisis_signal]
    return [f"{item.source}: {item.title[:80]}" for item in flagged[:limit]]


def fallback_archetypes(results: Sequence[SourceResult]) -> List[str]:
    return list(ARCHETYPE_FALLBACK[dominant_frame(results)])


def fallback_summary(results: Sequence[SourceResult], profile: TargetProfile, sentiment: SentimentSummary) -> str:
    sources = {item.source for item in results}
    text = (
        f"Discovery scan complete for {profile.name}. "
        f"Found {len(results)} mentions across {len(sources)} sources."
    )
    if results:
        text += (
            f" Sentiment is {sentiment.positive}% positive, {sentiment.neutral}% neutral "
            f"and {sentiment.negative}% negative (average {sentiment.average:+.2f})."
        )
    return text


def _subject(profile: TargetProfile) -> str:
    subject = profile.name
    if profile.role:
        subject += f", {profile.role}"
    if profile.company:
        subject += f" at {profile.company}"
    if profile.industry:
        subject += f" in {profile.industry}"
    return subject


class EnrichmentPipeline:
    """
    Annotates results with an LLM and builds the EnrichedBundle.

    The output is always fully populated: with no LLM (``llm=None``) or when
    every call fails, results stay unannotated and the archetype hints and
    summary come from statistical fallbacks.
    """

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        archetype_llm: Optional[BaseLLM] = None,
        summary_llm: Optional[BaseLLM] = None,
    ):
        self.llm = llm
        self.batch_size = max(1, int(batch_size))
        self.archetype_llm = archetype_llm or llm
        self.summary_llm = summary_llm or llm

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EnrichmentPipeline":
        """One LLM per task as configured; missing providers leave fallbacks in place."""
        settings = settings or get_settings()
        return cls(
            llm=get_task_llm("classify", settings.llm),
            batch_size=settings.scan.enrichment_batch_size,
            archetype_llm=get_task_llm("archetype", settings.llm),
            summary_llm=get_task_llm("summary", settings.llm),
        )

    async def enrich(
        self,
        results: List[SourceResult],
        profile: TargetProfile,
        total_mentions: Optional[int] = None,
    ) -> EnrichedBundle:
        await self.classify(results, profile)

        sentiment = sentiment_summary(results)
        signals = crisis_signals(results)
        archetypes, summary = await asyncio.gather(
            self.archetype_hints(results, profile),
            self.narrative_summary(results, profile, sentiment, signals),
        )

        return EnrichedBundle(
            results=results,
            total_mentions=len(results) if total_mentions is None else int(total_mentions),
            sentiment=sentiment,
            frames=frame_distribution(results),
            top_keywords=extract_keywords(results, profile),
            crisis_signals=signals,
            summary=summary,
            archetype_hints=archetypes,
        )

    async def classify(self, results: List[SourceResult], profile: TargetProfile) -> None:
        """Annotate ``results`` in place, one LLM request per batch."""
        if not results:
            return
        if self.llm is None:
            logger.info("No LLM available; results left unannotated")
            return

        for start in range(0, len(results), self.batch_size):
            batch = results[start:start + self.batch_size]
            await self._classify_batch(batch, profile, batch_no=start // self.batch_size)

    async def _classify_batch(self, batch: List[SourceResult], profile: TargetProfile, batch_no: int) -> None:
        prompt = CLASSIFY_PROMPT.format(name=profile.name, items=render_batch(batch))
        try:
            response = await self.llm.acomplete([Message.user(prompt)], json_mode=True)
        except LLMError as e:
            logger.warning(f"Classification batch {batch_no} failed ({len(batch)} items left unannotated): {e}")
            return
        except Exception:
            logger.exception(f"Classification batch {batch_no} raised unexpectedly ({len(batch)} items left unannotated)")
            return

        try:
            rows = parse_classification(response.content, len(batch))
        except EnrichmentParseError as e:
            logger.warning(f"Classification batch {batch_no} unparseable, neutral defaults applied: {e}")
            for item in batch:
                item.sentiment = 0.0
                item.frame = "other"
            return

        for idx, sentiment, frame, relevance in rows:
            item = batch[idx]
            item.sentiment = sentiment
            item.frame = frame
            item.relevance = relevance
        logger.debug(f"Classification batch {batch_no}: {len(rows)}/{len(batch)} items annotated")

    async def archetype_hints(self, results: Sequence[SourceResult], profile: TargetProfile) -> List[str]:
        if not results or self.archetype_llm is None:
            return fallback_archetypes(results)

        context = "\n".join(
            f"{item.source}: {item.title} - {item.snippet[:150]}"
            for item in rank_results(results)[:ARCHETYPE_CONTEXT_SIZE]
        )
        prompt = ARCHETYPE_PROMPT.format(subject=_subject(profile), results=context)
        try:
            response = await self.archetype_llm.acomplete(
                [Message.user(prompt)],
                json_mode=True,
                max_tokens=300,
            )
            hints = self._parse_archetypes(response.content)
        except (LLMError, ValueError) as e:
            logger.warning(f"Archetype hints unavailable, using frame fallback: {e}")
            return fallback_archetypes(results)
        except Exception:
            logger.exception("Archetype hints raised unexpectedly, using frame fallback")
            return fallback_archetypes(results)
        return hints or fallback_archetypes(results)

    async def narrative_summary(
        self,
        results: Sequence[SourceResult],
        profile: TargetProfile,
        sentiment: SentimentSummary,
        signals: Sequence[str],
    ) -> str:
        fallback = fallback_summary(results, profile, sentiment)
        if not results or self.summary_llm is None:
            return fallback

        if sentiment.average > 0.2:
            tone = "positive reputation"
        elif sentiment.average < -0.1:
            tone = "reputational risk present"
        else:
            tone = "neutral/mixed reputation"
        top_sources = list(dict.fromkeys(item.source for item in results[:10]))
        prompt = SUMMARY_PROMPT.format(
            subject=_subject(profile),
            count=len(results),
            positive=sentiment.positive,
            negative=sentiment.negative,
            frame=dominant_frame(results),
            tone=tone,
            crisis=" | WARNING: crisis signals detected" if signals else "",
            sources=", ".join(top_sources),
        )
        try:
            response = await self.summary_llm.acomplete(
                [Message.user(prompt)],
                max_tokens=200,
            )
        except LLMError as e:
            logger.warning(f"Narrative summary unavailable, using template: {e}")
            return fallback
        except Exception:
            logger.exception("Narrative summary raised unexpectedly, using template")
            return fallback
        text = (response.content or "").strip()
        return text or fallback

    @staticmethod
    def _parse_archetypes(text: str) -> List[str]:
        raw = _strip_fences(text)
        match = re.search(r"\{[\s\S]*\}", raw)
        if not match:
            return []
        parsed: Any = json.loads(match.group())
        values = parsed.get("archetypes") if isinstance(parsed, dict) else None
        if not isinstance(values, list):
            return []
        return [str(value).strip() for value in values if str(value or "").strip()][:5]
