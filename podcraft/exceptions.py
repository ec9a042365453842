"""
Custom exception hierarchy for Podcraft application.

Exceptions that know their failure category declare it through ``error_code``;
the error classifier reads that attribute before falling back to message
matching.
"""

from typing import Dict, Any, List, Optional


class PodcraftException(Exception):
    """Base exception for Podcraft application."""
    error_code: Optional[str] = None

    def __init__(self, message: str, context: Dict[str, Any] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(PodcraftException):
    """Raised when there are configuration issues."""
    error_code = "INTERNAL_ERROR"


class ValidationError(PodcraftException):
    """Raised when caller input is rejected before any provider is called."""
    error_code = "VALIDATION_ERROR"


class ServiceUnavailableError(PodcraftException):
    """Raised when no provider can serve a request."""
    error_code = "SERVICE_UNAVAILABLE"


class ProviderError(PodcraftException):
    """Base exception for external provider failures."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Dict[str, Any] = None,
    ):
        super().__init__(message, context)
        self.provider = provider
        self.status_code = status_code
        if provider:
            self.context.setdefault("provider", provider)


class ProviderConnectionError(ProviderError):
    """Raised when a provider cannot be reached."""
    error_code = "NETWORK_ERROR"


class ProviderTimeoutError(ProviderError):
    """Raised when a provider request times out."""
    error_code = "TIMEOUT"


class ProviderRateLimitError(ProviderError):
    """Raised when a provider rate limit or quota is exceeded."""
    error_code = "RATE_LIMIT"


class ProviderAuthError(ProviderError):
    """Raised when provider credentials are missing or rejected."""
    error_code = "AUTH_ERROR"


class ContentPolicyError(ProviderError):
    """Raised when a provider refuses content on policy grounds."""
    error_code = "CONTENT_POLICY"


class AutomationBlockedError(ProviderError):
    """Raised when a site blocks automated access."""
    error_code = "AUTOMATION_BLOCKED"


class InvalidResponseError(ProviderError):
    """Raised when a provider response is unusable (empty, too short, unparseable)."""
    error_code = "VALIDATION_ERROR"


class AudioProcessingError(PodcraftException):
    """Raised when the external audio filter pipeline fails."""
    error_code = "INTERNAL_ERROR"


class OperationCancelledError(PodcraftException):
    """Raised when a caller abandons a request; never retried or classified."""
    pass


class OperationFailedError(PodcraftException):
    """Raised when one operation fails terminally under its retry policy."""

    def __init__(self, message: str, classification: Any, attempts: int, context: Dict[str, Any] = None):
        super().__init__(message, context)
        self.classification = classification
        self.attempts = attempts


class ProviderChainExhaustedError(PodcraftException):
    """Raised when every provider in a fallback chain was skipped or failed."""

    def __init__(self, message: str, classification: Any, attempted_providers: List[str], context: Dict[str, Any] = None):
        super().__init__(message, context)
        self.classification = classification
        self.attempted_providers = list(attempted_providers)
