"""
Azure Speech TTS Provider

Neural voices over the Azure Cognitive Services REST endpoint. Text is sent
as SSML, so emphasis markup from preprocessing is honoured.
"""

import re
from typing import Optional, Dict, Any
from xml.sax.saxutils import escape
import httpx
from podcraft.services.tts.base import BaseTTSProvider
from podcraft.services.tts.voice_settings import VoiceParameters
from podcraft.utils.http_client import raise_for_provider_status, translate_transport_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_FORMAT = "audio-24khz-48kbitrate-mono-mp3"
ESCAPED_EMPHASIS = re.compile(r'&lt;(/?emphasis(?: level="(?:strong|moderate|reduced)")?)&gt;')


def build_ssml(text: str, voice: str, params: VoiceParameters) -> str:
    """
    Wrap text in an SSML document for one voice.

    Lower stability maps to a slightly faster, livelier prosody.
    """
    body = ESCAPED_EMPHASIS.sub(r"<\1>", escape(text))
    rate = "+5%" if params.stability < 0.6 else "0%"
    return (
        '<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="en-US">'
        f'<voice name="{voice}"><prosody rate="{rate}">{body}</prosody></voice>'
        "</speak>"
    )


class AzureTTSProvider(BaseTTSProvider):
    """Azure Speech provider; needs both a key and a region."""
    name = "azure"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.api_key = config.get("api_key") or ""
        self.region = config.get("region") or ""

    @property
    def endpoint(self) -> str:
        return f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/v1"

    def is_available(self) -> bool:
        return bool(self.api_key and self.region)

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        params: Optional[VoiceParameters] = None,
    ) -> bytes:
        self.ensure_ready(text)
        voice = self.resolve_voice(voice_id)
        ssml = build_ssml(text, voice, params or VoiceParameters())
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": OUTPUT_FORMAT,
            "User-Agent": "podcraft",
        }

        logger.debug(f"Synthesizing {len(text)} chars with Azure (voice: {voice})")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, content=ssml.encode("utf-8"), headers=headers)
        except httpx.HTTPError as e:
            raise translate_transport_error(e, "Azure Speech") from e

        raise_for_provider_status(response, "Azure Speech")
        audio = self.check_audio(response.content, "Azure Speech")
        logger.info(f"Azure synthesized {len(audio)} bytes of audio")
        return audio

    async def health_check(self) -> bool:
        if not self.is_available():
            return False
        url = f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/voices/list"
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                response = await client.get(url, headers={"Ocp-Apim-Subscription-Key": self.api_key})
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Azure health check error: {e}")
            return False
