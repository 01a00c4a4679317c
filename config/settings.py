"""
Settings Configuration
Pydantic-validated configuration for providers, the LLM and scan behaviour
"""
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ProviderCredentials(BaseSettings):
    """
    Third-party provider credentials.

    Adapters receive an instance at construction and never read the
    environment themselves. A missing key means the adapter is skipped.
    """
    serpapi_key: Optional[str] = Field(default=None, description="SerpAPI key (Google, Scholar, YouTube)")
    exa_api_key: Optional[str] = Field(default=None, description="Exa neural search key")
    newsapi_key: Optional[str] = Field(default=None, description="NewsAPI key")
    guardian_api_key: Optional[str] = Field(default=None, description="The Guardian Open Platform key")
    nyt_api_key: Optional[str] = Field(default=None, description="New York Times Article Search key")
    x_bearer_token: Optional[str] = Field(default=None, description="Twitter/X bearer token")
    github_token: Optional[str] = Field(default=None, description="GitHub token (optional, raises rate limits)")
    podcast_index_key: Optional[str] = Field(default=None, description="Podcast Index API key")
    podcast_index_secret: Optional[str] = Field(default=None, description="Podcast Index API secret")

    class Config:
        env_prefix = "PROVIDER_"

    def has(self, *names: str) -> bool:
        """True when every named credential is present and non-blank"""
        return all(str(getattr(self, name, "") or "").strip() for name in names)

    def missing(self, names: Iterable[str]) -> list:
        return [name for name in names if not self.has(name)]


class LLMSettings(BaseSettings):
    """Language model settings for enrichment"""
    provider: str = Field(default="openrouter", description="LLM provider: openrouter, openai")
    classify_model: str = Field(default="deepseek/deepseek-chat", description="Bulk sentiment/frame model")
    archetype_model: str = Field(default="openai/gpt-4o-mini", description="Archetype hint model")
    summary_model: str = Field(default="anthropic/claude-3-haiku", description="Narrative summary model")
    openai_fallback_model: str = Field(
        default="gpt-4o-mini", description="Model used on direct OpenAI for tasks whose model is another vendor's"
    )
    temperature: float = Field(default=0.2, description="Sampling temperature")
    max_tokens: int = Field(default=800, description="Max tokens per call")
    timeout: float = Field(default=30.0, description="Per-call timeout (seconds)")

    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key (fallback)")

    class Config:
        env_prefix = "LLM_"


class ScanSettings(BaseSettings):
    """Scan pipeline settings"""
    enrichment_batch_size: int = Field(default=20, description="Items per classification request")
    result_cap: int = Field(default=200, description="Ranked results kept after dedup")
    mentions_preview: int = Field(default=20, description="Mentions returned when polling without full=true")
    user_agent: str = Field(default="ReputationScan/1.0 (reputation monitoring)", description="Outbound User-Agent")

    class Config:
        env_prefix = "SCAN_"


class Settings(BaseSettings):
    """Root settings, aggregating every sub-config"""

    providers: ProviderCredentials = Field(default_factory=ProviderCredentials)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings from a specific .env file (defaults to config/.env)"""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            providers=ProviderCredentials(),
            llm=LLMSettings(),
            scan=ScanSettings(),
        )

    def provider_status(self) -> Dict[str, bool]:
        """Which provider credentials are configured, for diagnostics"""
        return {name: self.providers.has(name) for name in ProviderCredentials.model_fields}


@lru_cache()
def get_settings() -> Settings:
    """Global settings singleton"""
    return Settings.load_from_env_file()


def get_provider_credentials() -> ProviderCredentials:
    return get_settings().providers


def get_llm_settings() -> LLMSettings:
    return get_settings().llm


def get_scan_settings() -> ScanSettings:
    return get_settings().scan
