"""
LLM Factory
Build LLM clients from configuration
"""
from typing import Optional
import logging

from config import LLMSettings, get_llm_settings
from utils.exceptions import ConfigurationError

from .base import BaseLLM
from .openai_llm import OPENROUTER_BASE_URL, OpenAILLM


logger = logging.getLogger(__name__)


SUPPORTED_PROVIDERS = ("openrouter", "openai")

OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/reputation-scan",
    "X-Title": "Reputation Scan",
}

# Task -> LLMSettings attribute holding its model name
TASK_MODEL_FIELDS = {
    "classify": "classify_model",
    "archetype": "archetype_model",
    "summary": "summary_model",
}


def _openai_model(model: str, settings: LLMSettings) -> str:
    """Map an OpenRouter ``vendor/model`` name to one api.openai.com serves."""
    if "/" not in model:
        return model
    vendor, name = model.split("/", 1)
    return name if vendor == "openai" else settings.openai_fallback_model


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    Build an LLM instance

    Args:
        provider: openrouter or openai (defaults to settings)
        model: model name (defaults to the classification model)
        settings: explicit settings, else the cached global ones
        **kwargs: temperature, max_tokens, timeout overrides

    Raises:
        ConfigurationError: unsupported provider or missing API key

    Example:
        llm = get_llm()
        llm = get_llm(provider="openai", model="gpt-4o-mini")
    """
    settings = settings or get_llm_settings()
    provider = (provider or settings.provider or "openrouter").lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    model = model or settings.classify_model
    for key in ("temperature", "max_tokens", "timeout"):
        kwargs.setdefault(key, getattr(settings, key))

    if provider == "openrouter":
        api_key = kwargs.pop("api_key", None) or settings.openrouter_api_key
        if not api_key:
            raise ConfigurationError("LLM_OPENROUTER_API_KEY is not set")
        return OpenAILLM(
            model=model,
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            default_headers=OPENROUTER_HEADERS,
            **kwargs,
        )

    api_key = kwargs.pop("api_key", None) or settings.openai_api_key
    if not api_key:
        raise ConfigurationError("LLM_OPENAI_API_KEY is not set")
    return OpenAILLM(model=_openai_model(model, settings), api_key=api_key, **kwargs)


def get_task_llm(task: str, settings: Optional[LLMSettings] = None) -> Optional[BaseLLM]:
    """
    LLM for one enrichment task, or None when no provider is configured.

    Falls back from OpenRouter to OpenAI when only the OpenAI key is present;
    models from other vendors are then replaced by ``openai_fallback_model``.
    """
    settings = settings or get_llm_settings()
    field_name = TASK_MODEL_FIELDS.get(task)
    if field_name is None:
        raise ConfigurationError(f"Unknown LLM task: {task}")
    model = getattr(settings, field_name)

    for provider in (settings.provider, "openai"):
        try:
            return get_llm(provider=provider, model=model, settings=settings)
        except ConfigurationError as e:
            logger.debug(f"LLM for {task} via {provider} unavailable: {e}")
    logger.warning(f"No LLM configured for {task}; enrichment will use fallbacks")
    return None
