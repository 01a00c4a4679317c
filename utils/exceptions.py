"""
Custom Exceptions
Error taxonomy for the scan engine
"""


class ReputationScanError(Exception):
    """Base exception for the reputation scan engine"""
    
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ReputationScanError):
    """Invalid configuration"""
    pass


class ProviderError(ReputationScanError):
    """Failure at a single provider adapter (network, timeout, auth, parse)"""
    
    def __init__(self, message: str, source: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.source = source


class LLMError(ReputationScanError):
    """Language model call failed"""
    
    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class EnrichmentParseError(ReputationScanError):
    """Language model response did not parse as the expected structure"""
    pass


class OrchestrationFault(ReputationScanError):
    """Uncaught fault inside the scan pipeline (aggregation, enrichment, scoring, persistence)"""
    
    def __init__(self, message: str, run_id: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.run_id = run_id


class NotFoundError(ReputationScanError):
    """Requested target or run does not exist"""
    pass


class AuthorizationError(ReputationScanError):
    """Caller does not own the requested target"""
    pass
