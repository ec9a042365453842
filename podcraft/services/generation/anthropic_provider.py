"""
Anthropic script-generation provider.
"""

from typing import Any, Dict, Optional
import anthropic
from podcraft.services.generation.base import BaseGenerationProvider, SYSTEM_PROMPT, translate_sdk_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class AnthropicGenerationProvider(BaseGenerationProvider):
    name = "anthropic"

    def __init__(self, config: Dict[str, Any], client: Optional[Any] = None):
        super().__init__(config)
        self.model = self.model or "claude-3-5-haiku-latest"
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            logger.info("✅ Anthropic client initialized successfully")
        return self._client

    async def generate(self, prompt: str) -> str:
        self.ensure_ready()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise translate_sdk_error(e, anthropic, "Anthropic") from e
        text = "".join(getattr(block, "text", "") for block in response.content)
        return self.check_text(text)
