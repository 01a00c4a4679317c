"""
Configuration Management Module
Provider credentials, LLM and scan settings
"""
from .settings import (
    Settings,
    ProviderCredentials,
    LLMSettings,
    ScanSettings,
    get_settings,
    get_provider_credentials,
    get_llm_settings,
    get_scan_settings,
)

__all__ = [
    "Settings",
    "ProviderCredentials",
    "LLMSettings",
    "ScanSettings",
    "get_settings",
    "get_provider_credentials",
    "get_llm_settings",
    "get_scan_settings",
]
