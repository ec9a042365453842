"""
Main-content extraction with trafilatura.
"""

import asyncio
import trafilatura
from podcraft.services.scraping.base import BaseScrapeProvider, ScrapedPage, clean_text


class TrafilaturaScrapeProvider(BaseScrapeProvider):
    name = "trafilatura"

    async def extract(self, url: str, html: str) -> ScrapedPage:
        # trafilatura is CPU-bound; keep it off the event loop.
        text = await asyncio.to_thread(
            trafilatura.extract,
            html,
            url=url,
            include_comments=False,
            include_tables=True,
        )
        metadata = await asyncio.to_thread(trafilatura.extract_metadata, html, default_url=url)
        title = getattr(metadata, "title", None) if metadata else None
        description = getattr(metadata, "description", None) if metadata else None
        return ScrapedPage(
            url=url,
            title=self.first_nonempty(title, url),
            content=clean_text(text or ""),
            description=self.first_nonempty(description),
        )
