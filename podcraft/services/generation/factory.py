"""
Generation Provider Factory
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type
from podcraft.config import Settings, get_settings
from podcraft.exceptions import ConfigurationError
from podcraft.services.generation.anthropic_provider import AnthropicGenerationProvider
from podcraft.services.generation.base import BaseGenerationProvider
from podcraft.services.generation.gemini import GeminiGenerationProvider
from podcraft.services.generation.ollama import OllamaGenerationProvider
from podcraft.services.generation.openai_provider import OpenAIGenerationProvider
from podcraft.utils.fallback_chain import ProviderDescriptor
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class GenerationProviderKind(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


PROVIDER_REGISTRY: Dict[GenerationProviderKind, Type[BaseGenerationProvider]] = {
    GenerationProviderKind.GEMINI: GeminiGenerationProvider,
    GenerationProviderKind.OPENAI: OpenAIGenerationProvider,
    GenerationProviderKind.ANTHROPIC: AnthropicGenerationProvider,
    GenerationProviderKind.OLLAMA: OllamaGenerationProvider,
}


class GenerationProviderFactory:
    PROVIDER_REGISTRY = PROVIDER_REGISTRY

    @staticmethod
    def create_provider(provider_name: str, settings: Optional[Settings] = None) -> BaseGenerationProvider:
        try:
            kind = GenerationProviderKind(provider_name.lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown generation provider: {provider_name}. "
                f"Valid providers: {', '.join(k.value for k in GenerationProviderKind)}"
            )
        config = GenerationProviderFactory._build_config_from_settings(kind, settings or get_settings())
        provider = PROVIDER_REGISTRY[kind](config)
        logger.info(f"Created {kind.value} generation provider (available: {provider.is_available()})")
        return provider

    @staticmethod
    def _build_config_from_settings(kind: GenerationProviderKind, settings: Settings) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "timeout": settings.GENERATION_TIMEOUT,
            "max_tokens": settings.GENERATION_MAX_TOKENS,
        }
        if kind == GenerationProviderKind.GEMINI:
            config.update({"api_key": settings.GEMINI_API_KEY, "model": settings.GEMINI_MODEL})
        elif kind == GenerationProviderKind.OPENAI:
            config.update({"api_key": settings.OPENAI_API_KEY, "model": settings.OPENAI_MODEL})
        elif kind == GenerationProviderKind.ANTHROPIC:
            config.update({"api_key": settings.ANTHROPIC_API_KEY, "model": settings.ANTHROPIC_MODEL})
        elif kind == GenerationProviderKind.OLLAMA:
            config.update({
                "enabled": settings.OLLAMA_ENABLED,
                "base_url": settings.OLLAMA_BASE_URL,
                "model": settings.OLLAMA_MODEL,
            })
        return config

    @staticmethod
    def create_providers(settings: Optional[Settings] = None) -> List[BaseGenerationProvider]:
        settings = settings or get_settings()
        return [
            GenerationProviderFactory.create_provider(name, settings)
            for name in settings.generation_provider_order
        ]


def build_generation_descriptors(providers: List[BaseGenerationProvider]) -> List[ProviderDescriptor]:
    return [
        ProviderDescriptor(
            name=provider.name,
            is_available=provider.is_available,
            invoke=provider.generate,
            timeout=provider.timeout,
        )
        for provider in providers
    ]
