"""
Base script-generation provider interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
from podcraft.exceptions import (
    ContentPolicyError,
    InvalidResponseError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert podcast script writer. Turn source material into an engaging, "
    "natural-sounding spoken script for a single host."
)


class BaseGenerationProvider(ABC):
    """One tagged variant of the closed set of script-generation providers."""
    name: str = ""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.api_key = config.get("api_key") or ""
        self.model = config.get("model", "")
        self.timeout = config.get("timeout", 90)
        self.max_tokens = config.get("max_tokens", 4000)

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Raises:
            ProviderError: If generation fails
        """
        pass

    def is_available(self) -> bool:
        return bool(self.api_key)

    def ensure_ready(self) -> None:
        if not self.is_available():
            raise ProviderAuthError(f"{self.name} API key is not configured", self.name)

    def check_text(self, text: Any) -> str:
        if not isinstance(text, str) or not text.strip():
            raise InvalidResponseError(f"{self.name} returned an invalid (empty) response", self.name)
        logger.debug(f"{self.name} generated {len(text)} characters")
        return text.strip()


def translate_sdk_error(error: Exception, sdk: Any, provider: str) -> ProviderError:
    """
    Map an openai/anthropic SDK exception onto the provider hierarchy.

    Both SDKs expose the same exception names, so the module is passed in.
    """
    message = str(error)
    if isinstance(error, sdk.APITimeoutError):
        return ProviderTimeoutError(f"{provider} request timed out", provider)
    if isinstance(error, sdk.APIConnectionError):
        return ProviderConnectionError(f"{provider} connection failed: {message}", provider)
    if isinstance(error, sdk.RateLimitError):
        return ProviderRateLimitError(f"{provider} rate limit exceeded: {message}", provider, 429)
    if isinstance(error, (sdk.AuthenticationError, sdk.PermissionDeniedError)):
        return ProviderAuthError(f"{provider} rejected the API key: {message}", provider, getattr(error, "status_code", None))
    if "content_policy" in message or "safety" in message.lower():
        return ContentPolicyError(f"{provider} refused the content: {message}", provider)
    return ProviderError(f"{provider} request failed: {message}", provider, getattr(error, "status_code", None))
