"""
Google Gemini script-generation provider (REST via httpx).
"""

from typing import Any, Dict
import httpx
from podcraft.exceptions import ContentPolicyError, InvalidResponseError
from podcraft.services.generation.base import BaseGenerationProvider, SYSTEM_PROMPT
from podcraft.utils.http_client import raise_for_provider_status, translate_transport_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class GeminiGenerationProvider(BaseGenerationProvider):
    name = "gemini"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.model = self.model or "gemini-1.5-flash"
        self.base_url = config.get("base_url", "https://generativelanguage.googleapis.com/v1beta")

    async def generate(self, prompt: str) -> str:
        self.ensure_ready()
        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": self.max_tokens},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    params={"key": self.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise translate_transport_error(e, "Gemini") from e

        raise_for_provider_status(response, "Gemini")
        return self.check_text(self._extract_text(response.json()))

    def _extract_text(self, body: Dict[str, Any]) -> str:
        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ContentPolicyError(f"Gemini blocked the prompt (safety: {block_reason})", self.name)
        candidates = body.get("candidates") or []
        if not candidates:
            raise InvalidResponseError("Gemini returned an invalid response with no candidates", self.name)
        candidate = candidates[0]
        if candidate.get("finishReason") == "SAFETY":
            raise ContentPolicyError("Gemini stopped generation for safety reasons", self.name)
        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
