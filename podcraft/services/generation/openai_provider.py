"""
OpenAI script-generation provider.
"""

from typing import Any, Dict, Optional
import openai
from podcraft.services.generation.base import BaseGenerationProvider, SYSTEM_PROMPT, translate_sdk_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIGenerationProvider(BaseGenerationProvider):
    name = "openai"

    def __init__(self, config: Dict[str, Any], client: Optional[Any] = None):
        super().__init__(config)
        self.model = self.model or "gpt-4o-mini"
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            # SDK retries are disabled; the retry controller owns retry policy.
            self._client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            logger.info("✅ OpenAI client initialized successfully")
        return self._client

    async def generate(self, prompt: str) -> str:
        self.ensure_ready()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=0.7,
            )
        except openai.APIError as e:
            raise translate_sdk_error(e, openai, "OpenAI") from e
        return self.check_text(response.choices[0].message.content)
