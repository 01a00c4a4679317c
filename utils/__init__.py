"""
Utils Module
Shared logging and error types
"""
from .logger import setup_logger, get_logger
from .exceptions import (
    ReputationScanError,
    ConfigurationError,
    ProviderError,
    LLMError,
    EnrichmentParseError,
    OrchestrationFault,
    NotFoundError,
    AuthorizationError,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "ReputationScanError",
    "ConfigurationError",
    "ProviderError",
    "LLMError",
    "EnrichmentParseError",
    "OrchestrationFault",
    "NotFoundError",
    "AuthorizationError",
]
