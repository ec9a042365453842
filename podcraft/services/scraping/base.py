"""
Base content-acquisition provider interface.

Providers download a page with browser-like headers and extract its main
article text. Pages that are unreachable, blocked, or yield too little text
raise provider errors so the chain moves on to the next extractor.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
from podcraft.exceptions import AutomationBlockedError, InvalidResponseError
from podcraft.utils.http_client import BROWSER_HEADERS, raise_for_provider_status, translate_transport_error
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

MIN_CONTENT_LENGTH = 100

BOT_CHECK_MARKERS = re.compile(
    r"cf-browser-verification|cf-chl-|<title>\s*just a moment|g-recaptcha|h-captcha|are you a robot",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ScrapedPage:
    url: str
    title: str
    content: str
    description: str = ""


def clean_text(text: str) -> str:
    lines = (re.sub(r"[ \t]+", " ", line).strip() for line in text.splitlines())
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


class BaseScrapeProvider(ABC):
    """One tagged variant of the closed set of content extractors."""
    name: str = ""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.timeout = config.get("timeout", 30)
        self.user_agent = config.get("user_agent", "Mozilla/5.0")

    def is_available(self) -> bool:
        return True

    async def fetch(self, url: str) -> ScrapedPage:
        """
        Download and extract a page.

        Raises:
            ProviderError: If download fails, the site blocks automation, or
                the extracted content is insufficient
        """
        html = await self.download(url)
        page = await self.extract(url, html)
        if len(page.content) <= MIN_CONTENT_LENGTH:
            raise InvalidResponseError(
                f"{self.name}: insufficient content extracted ({len(page.content)} chars)", self.name
            )
        logger.info(f"{self.name} extracted {len(page.content)} chars from {url}")
        return page

    async def download(self, url: str) -> str:
        headers = {**BROWSER_HEADERS, "User-Agent": self.user_agent}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise translate_transport_error(e, self.name) from e

        raise_for_provider_status(response, self.name, auth_statuses=(401,), blocked_statuses=(403,))
        html = response.text
        if BOT_CHECK_MARKERS.search(html[:20000]):
            raise AutomationBlockedError(f"{url} served a bot-check page", self.name)
        return html

    @abstractmethod
    async def extract(self, url: str, html: str) -> ScrapedPage:
        pass

    @staticmethod
    def first_nonempty(*values: Optional[str]) -> str:
        for value in values:
            if value and value.strip():
                return value.strip()
        return ""
