"""
Base TTS Provider Interface

This module defines the abstract base class that all TTS providers must implement.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from podcraft.exceptions import InvalidResponseError, ProviderAuthError
from podcraft.services.tts.voice_settings import VoiceParameters
from podcraft.services.tts.voices import resolve_voice
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class BaseTTSProvider(ABC):
    """
    Abstract base class for all TTS providers.

    Each subclass is one tagged variant of the closed provider set; ``name``
    is the tag used in chains, voice mapping and configuration.
    """
    name: str = ""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the TTS provider.

        Args:
            config: Configuration dictionary containing provider-specific settings
        """
        self.config = config
        self.timeout = config.get("timeout", 60)
        logger.debug(f"Initialized {self.name} TTS provider")

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        params: Optional[VoiceParameters] = None,
    ) -> bytes:
        """
        Synthesize text to speech audio.

        Args:
            text: Text to convert to speech (may contain emphasis markup)
            voice_id: Abstract or provider-native voice id (provider default if unknown)
            params: Per-chunk voice parameters

        Returns:
            bytes: Encoded audio (mp3)

        Raises:
            ProviderError: If synthesis fails
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured; must not perform I/O."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the TTS provider is reachable.

        Returns:
            bool: True if provider is healthy, False otherwise
        """
        pass

    def resolve_voice(self, voice_id: Optional[str]) -> str:
        return resolve_voice(voice_id, self.name)

    def ensure_ready(self, text: str) -> None:
        """Reject calls that cannot succeed before any network traffic."""
        if not self.is_available():
            raise ProviderAuthError(f"{self.name} API key is not configured", self.name)
        if not text or not text.strip():
            raise InvalidResponseError(f"{self.name}: invalid text input (empty)", self.name)
        max_length = self.config.get("max_text_length", 5000)
        if len(text) > max_length:
            logger.warning(f"Text length {len(text)} exceeds {self.name} maximum {max_length}")
            raise InvalidResponseError(
                f"{self.name}: invalid text input (length {len(text)} exceeds {max_length})", self.name
            )

    @staticmethod
    def check_audio(audio: bytes, provider: str) -> bytes:
        if not audio:
            raise InvalidResponseError(f"{provider} returned empty audio", provider)
        return audio
