"""
Scrape Provider Factory
"""

from enum import Enum
from typing import Dict, List, Optional, Type
from podcraft.config import Settings, get_settings
from podcraft.exceptions import ConfigurationError
from podcraft.services.scraping.base import BaseScrapeProvider
from podcraft.services.scraping.soup_provider import SoupScrapeProvider
from podcraft.services.scraping.trafilatura_provider import TrafilaturaScrapeProvider
from podcraft.utils.fallback_chain import ProviderDescriptor


class ScrapeProviderKind(str, Enum):
    TRAFILATURA = "trafilatura"
    SOUP = "soup"


PROVIDER_REGISTRY: Dict[ScrapeProviderKind, Type[BaseScrapeProvider]] = {
    ScrapeProviderKind.TRAFILATURA: TrafilaturaScrapeProvider,
    ScrapeProviderKind.SOUP: SoupScrapeProvider,
}


class ScrapeProviderFactory:
    PROVIDER_REGISTRY = PROVIDER_REGISTRY

    @staticmethod
    def create_provider(provider_name: str, settings: Optional[Settings] = None) -> BaseScrapeProvider:
        settings = settings or get_settings()
        try:
            kind = ScrapeProviderKind(provider_name.lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown scrape provider: {provider_name}. "
                f"Valid providers: {', '.join(k.value for k in ScrapeProviderKind)}"
            )
        return PROVIDER_REGISTRY[kind]({
            "timeout": settings.SCRAPE_TIMEOUT,
            "user_agent": settings.SCRAPE_USER_AGENT,
        })

    @staticmethod
    def create_providers(settings: Optional[Settings] = None) -> List[BaseScrapeProvider]:
        settings = settings or get_settings()
        return [ScrapeProviderFactory.create_provider(name, settings) for name in settings.scrape_provider_order]


def build_scrape_descriptors(providers: List[BaseScrapeProvider]) -> List[ProviderDescriptor]:
    return [
        ProviderDescriptor(
            name=provider.name,
            is_available=provider.is_available,
            invoke=provider.fetch,
            timeout=provider.timeout,
        )
        for provider in providers
    ]
