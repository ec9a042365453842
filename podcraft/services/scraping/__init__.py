"""
Content acquisition: article extractors and the scrape service.
"""

from podcraft.services.scraping.factory import (
    ScrapeProviderFactory,
    ScrapeProviderKind,
    build_scrape_descriptors,
)
from podcraft.services.scraping.service import ScrapeOptions, ScrapeResult, ScrapeService

__all__ = [
    "ScrapeProviderFactory",
    "ScrapeProviderKind",
    "build_scrape_descriptors",
    "ScrapeOptions",
    "ScrapeResult",
    "ScrapeService",
]
