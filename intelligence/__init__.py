"""
Intelligence Module
LLM abstraction and the enrichment pipeline
"""
from .llm import (
    BaseLLM,
    LLMResponse,
    Message,
    OpenAILLM,
    get_llm,
    get_task_llm,
)
from .enrichment import (
    ARCHETYPE_FALLBACK,
    EnrichmentPipeline,
    crisis_signals,
    extract_keywords,
    frame_distribution,
    parse_classification,
    sentiment_summary,
)

__all__ = [
    # LLM
    "BaseLLM",
    "LLMResponse",
    "Message",
    "OpenAILLM",
    "get_llm",
    "get_task_llm",
    # Enrichment
    "ARCHETYPE_FALLBACK",
    "EnrichmentPipeline",
    "crisis_signals",
    "extract_keywords",
    "frame_distribution",
    "parse_classification",
    "sentiment_summary",
]
