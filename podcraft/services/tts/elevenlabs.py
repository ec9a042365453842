"""
ElevenLabs TTS Provider

Cloud TTS with expressive voices and per-request voice settings.
Requires API key for authentication.
"""

from typing import Optional, Dict, Any
import httpx
from podcraft.exceptions import ProviderError
from podcraft.services.tts.base import BaseTTSProvider
from podcraft.services.tts.script_preprocessor import strip_emphasis
from podcraft.services.tts.voice_settings import VoiceParameters
from podcraft.utils.http_client import raise_for_provider_status, translate_transport_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class ElevenLabsTTSProvider(BaseTTSProvider):
    """
    ElevenLabs TTS provider implementation.

    Emphasis markup is stripped before sending; expressiveness is carried by
    the voice settings instead.
    """
    name = "elevenlabs"

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize ElevenLabs TTS provider.

        Args:
            config: Configuration dictionary with:
                - api_key: ElevenLabs API key
                - base_url: ElevenLabs API base URL (default: https://api.elevenlabs.io/v1)
                - timeout: Request timeout in seconds (default: 60)
                - model_id: Model identifier (default: eleven_multilingual_v2)
        """
        super().__init__(config)
        self.api_key = config.get("api_key") or ""
        self.base_url = config.get("base_url", "https://api.elevenlabs.io/v1")
        self.model_id = config.get("model_id", "eleven_multilingual_v2")

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        params: Optional[VoiceParameters] = None,
    ) -> bytes:
        """
        Synthesize text to speech using the ElevenLabs API.

        Raises:
            ProviderAuthError: If the API key is missing or rejected
            ProviderRateLimitError: If rate limit is exceeded
            ProviderTimeoutError: If request times out
            ProviderError: For any other failure
        """
        plain_text = strip_emphasis(text)
        self.ensure_ready(plain_text)
        voice = self.resolve_voice(voice_id)
        params = params or VoiceParameters()

        payload = {
            "text": plain_text,
            "model_id": self.model_id,
            "voice_settings": params.to_dict(),
        }
        headers = {
            "Accept": "audio/mpeg",
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        logger.debug(f"Synthesizing {len(plain_text)} chars with ElevenLabs (voice: {voice})")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/text-to-speech/{voice}",
                    json=payload,
                    headers=headers,
                    params={"output_format": "mp3_44100_128"},
                )
        except httpx.HTTPError as e:
            raise translate_transport_error(e, "ElevenLabs") from e

        raise_for_provider_status(response, "ElevenLabs", auth_statuses=(401,))
        audio = self.check_audio(response.content, "ElevenLabs")
        logger.info(f"ElevenLabs synthesized {len(audio)} bytes of audio")
        return audio

    async def health_check(self) -> bool:
        """
        Check if ElevenLabs API is accessible.

        Returns:
            bool: True if API is accessible, False otherwise
        """
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                response = await client.get(f"{self.base_url}/user", headers={"xi-api-key": self.api_key})
            if response.status_code == 200:
                logger.debug("ElevenLabs API is accessible")
                return True
            logger.warning(f"ElevenLabs health check failed: {response.status_code}")
            return False
        except (httpx.HTTPError, ProviderError) as e:
            logger.warning(f"ElevenLabs health check error: {e}")
            return False
