"""
Ollama script-generation provider for a local model server.
"""

from typing import Any, Dict
import httpx
from podcraft.services.generation.base import BaseGenerationProvider, SYSTEM_PROMPT
from podcraft.utils.http_client import raise_for_provider_status, translate_transport_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaGenerationProvider(BaseGenerationProvider):
    name = "ollama"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.enabled = bool(config.get("enabled", False))
        self.base_url = config.get("base_url", "http://localhost:11434").rstrip("/")
        self.model = self.model or "llama3"
        self.api_url = f"{self.base_url}/api/generate"

    def is_available(self) -> bool:
        return self.enabled

    async def generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "options": {"temperature": 0.7, "num_predict": self.max_tokens},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise translate_transport_error(e, "Ollama") from e

        raise_for_provider_status(response, "Ollama")
        return self.check_text(response.json().get("response", ""))
