"""
Selector-based extraction with BeautifulSoup, used when trafilatura finds
nothing usable.
"""

from bs4 import BeautifulSoup
from podcraft.services.scraping.base import BaseScrapeProvider, MIN_CONTENT_LENGTH, ScrapedPage, clean_text

NOISE_SELECTORS = (
    "script", "style", "noscript", "iframe", "nav", "header", "footer", "aside",
    "form", ".advertisement", ".ads", ".ad", ".social-share", ".comments", "#comments",
    ".cookie-banner", ".newsletter", ".related-posts", ".sidebar",
)

CONTENT_SELECTORS = (
    "article", "main", "[role=main]", ".post-content", ".entry-content",
    ".article-body", ".article-content", ".story-body", ".content", "#content",
)


class SoupScrapeProvider(BaseScrapeProvider):
    name = "soup"

    async def extract(self, url: str, html: str) -> ScrapedPage:
        soup = BeautifulSoup(html, "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else ""
        og_title = soup.find("meta", attrs={"property": "og:title"})
        description_tag = soup.find("meta", attrs={"name": "description"}) or soup.find(
            "meta", attrs={"property": "og:description"}
        )

        for element in soup.select(",".join(NOISE_SELECTORS)):
            element.decompose()

        content = ""
        for selector in CONTENT_SELECTORS:
            node = soup.select_one(selector)
            if node is not None:
                content = clean_text(node.get_text(separator="\n"))
                if len(content) > MIN_CONTENT_LENGTH:
                    break
        if len(content) <= MIN_CONTENT_LENGTH and soup.body is not None:
            content = clean_text(soup.body.get_text(separator="\n"))

        return ScrapedPage(
            url=url,
            title=self.first_nonempty(og_title.get("content") if og_title else None, title, url),
            content=content,
            description=self.first_nonempty(description_tag.get("content") if description_tag else None),
        )
