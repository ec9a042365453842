"""
Content Scrape Service

Fetches article text from a URL through the scrape provider chain.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import urlparse

from podcraft.exceptions import ValidationError
from podcraft.services.scraping.base import ScrapedPage
from podcraft.utils.error_classifier import ErrorClassification
from podcraft.utils.fallback_chain import FallbackChainExecutor, ProviderDescriptor, build_chain
from podcraft.utils.logger import get_logger
from podcraft.utils.retry import CancellationToken, RetryPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScrapeOptions:
    provider_hint: Optional[str] = None


@dataclass(frozen=True)
class ScrapeResult:
    success: bool
    title: Optional[str] = None
    content: Optional[str] = None
    error: Optional[ErrorClassification] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "title": self.title,
            "content": self.content,
            "error": self.error.to_dict() if self.error else None,
            "metadata": dict(self.metadata),
        }


def validate_url(url: str) -> str:
    """
    Normalize and validate a URL to scrape.

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
    """
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid URL format: {candidate or '<empty>'}", {"url": candidate})
    return candidate


class ScrapeService:
    """URL-to-article extraction over the scrape provider chain."""

    def __init__(
        self,
        executor: FallbackChainExecutor,
        providers: Sequence[ProviderDescriptor],
        policy: Optional[RetryPolicy] = None,
    ):
        self.executor = executor
        self.providers = list(providers)
        self.policy = policy

    async def scrape_content(
        self,
        url: str,
        options: Optional[ScrapeOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ScrapeResult:
        options = options or ScrapeOptions()
        start = time.monotonic()
        try:
            url = validate_url(url)
        except ValidationError as e:
            error = self.executor.classifier.classify(e, {"operation": "scrape_content", "url": url})
            return ScrapeResult(success=False, error=error, metadata={"url": url, "processing_time": 0.0})

        logger.info(f"🔍 Scraping {url}")
        chain = build_chain(self.providers, options.provider_hint)
        result = await self.executor.run(
            chain,
            lambda provider: partial(provider.invoke, url),
            preferred=options.provider_hint,
            context={"operation": "scrape_content", "url": url},
            policy=self.policy,
            cancel_token=cancel_token,
        )
        metadata = {**result.metadata(), "url": url, "processing_time": round(time.monotonic() - start, 3)}
        if not result.success:
            return ScrapeResult(success=False, error=result.error, metadata=metadata)

        page: ScrapedPage = result.payload
        metadata.update({
            "description": page.description,
            "word_count": len(page.content.split()),
            "extracted_at": datetime.now(timezone.utc).isoformat(),
        })
        return ScrapeResult(success=True, title=page.title, content=page.content, metadata=metadata)
