"""Tests for credential handling and LLM client construction."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from config import LLMSettings, ProviderCredentials, Settings
from intelligence import EnrichmentPipeline
from intelligence.llm import Message, OpenAILLM, get_llm, get_task_llm
from utils.exceptions import ConfigurationError, LLMError


def _llm_settings(**overrides) -> LLMSettings:
    values = {"openrouter_api_key": None, "openai_api_key": None}
    values.update(overrides)
    return LLMSettings(**values)


def test_credentials_has_and_missing() -> None:
    creds = ProviderCredentials(serpapi_key="k", exa_api_key="  ", podcast_index_key="a", podcast_index_secret=None)

    assert creds.has("serpapi_key") is True
    assert creds.has("exa_api_key") is False
    assert creds.has("podcast_index_key", "podcast_index_secret") is False
    assert creds.missing(["serpapi_key", "podcast_index_secret"]) == ["podcast_index_secret"]


def test_provider_status_lists_every_credential() -> None:
    status = Settings(providers=ProviderCredentials(serpapi_key="k")).provider_status()

    assert status["serpapi_key"] is True
    assert "podcast_index_secret" in status


def test_get_llm_requires_a_key() -> None:
    with pytest.raises(ConfigurationError):
        get_llm(settings=_llm_settings())
    with pytest.raises(ConfigurationError):
        get_llm(provider="anthropic", settings=_llm_settings(openrouter_api_key="k"))


def test_openrouter_keeps_vendor_model_names() -> None:
    llm = get_llm(settings=_llm_settings(openrouter_api_key="or-key"))

    assert isinstance(llm, OpenAILLM)
    assert llm.provider == "openrouter"
    assert llm.model == "deepseek/deepseek-chat"
    assert llm.default_headers["X-Title"] == "Reputation Scan"


def test_task_llm_falls_back_to_openai_and_strips_openai_vendor() -> None:
    llm = get_task_llm("archetype", _llm_settings(openai_api_key="oa-key", archetype_model="openai/gpt-4o"))

    assert llm.provider == "openai"
    assert llm.model == "gpt-4o"


@pytest.mark.parametrize("task", ["classify", "summary"])
def test_task_llm_on_openai_replaces_other_vendor_models(task: str) -> None:
    llm = get_task_llm(task, _llm_settings(openai_api_key="oa-key"))

    assert llm.provider == "openai"
    assert llm.model == "gpt-4o-mini"

    custom = get_task_llm(task, _llm_settings(openai_api_key="oa-key", openai_fallback_model="gpt-4.1-mini"))
    assert custom.model == "gpt-4.1-mini"


def test_get_llm_keeps_plain_openai_model_names() -> None:
    llm = get_llm(provider="openai", model="gpt-4o", settings=_llm_settings(openai_api_key="oa-key"))

    assert llm.model == "gpt-4o"


def test_task_llm_is_none_without_any_provider() -> None:
    assert get_task_llm("summary", _llm_settings()) is None
    with pytest.raises(ConfigurationError):
        get_task_llm("translate", _llm_settings())


def test_pipeline_from_settings_without_keys_uses_fallbacks() -> None:
    settings = Settings(llm=_llm_settings())
    pipeline = EnrichmentPipeline.from_settings(settings)

    assert pipeline.llm is None
    assert pipeline.archetype_llm is None
    assert pipeline.batch_size == settings.scan.enrichment_batch_size


@pytest.mark.asyncio
async def test_openai_llm_requests_json_mode() -> None:
    captured = {}

    async def _create(**params):
        captured.update(params)
        return SimpleNamespace(
            model=params["model"],
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"items": []}'), finish_reason="stop")],
            usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
        )

    llm = OpenAILLM(model="deepseek/deepseek-chat", api_key="k")
    llm._async_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=_create)))

    response = await llm.acomplete([Message.user("hi")], json_mode=True, max_tokens=50)

    assert response.content == '{"items": []}'
    assert response.usage["total_tokens"] == 5
    assert captured["response_format"] == {"type": "json_object"}
    assert captured["max_tokens"] == 50
    assert captured["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_openai_llm_wraps_sdk_errors() -> None:
    from openai import OpenAIError

    async def _create(**params):
        raise OpenAIError("The model `deepseek-chat` does not exist")

    llm = OpenAILLM(model="deepseek-chat", api_key="k")
    llm._async_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=_create)))

    with pytest.raises(LLMError) as excinfo:
        await llm.acomplete([Message.user("hi")])

    assert excinfo.value.provider == "openai"
    assert excinfo.value.details["model"] == "deepseek-chat"
