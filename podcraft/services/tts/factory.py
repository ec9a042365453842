"""
TTS Provider Factory

Builds the configured speech providers and binds them into fallback-chain
descriptors.
"""

from enum import Enum
from typing import Dict, Any, List, Optional, Type
from podcraft.config import Settings, get_settings
from podcraft.exceptions import ConfigurationError
from podcraft.services.tts.azure import AzureTTSProvider
from podcraft.services.tts.base import BaseTTSProvider
from podcraft.services.tts.elevenlabs import ElevenLabsTTSProvider
from podcraft.utils.fallback_chain import ProviderDescriptor
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class TTSProviderKind(str, Enum):
    AZURE = "azure"
    ELEVENLABS = "elevenlabs"


PROVIDER_REGISTRY: Dict[TTSProviderKind, Type[BaseTTSProvider]] = {
    TTSProviderKind.AZURE: AzureTTSProvider,
    TTSProviderKind.ELEVENLABS: ElevenLabsTTSProvider,
}


def parse_kind(provider_name: str) -> TTSProviderKind:
    try:
        return TTSProviderKind(provider_name.lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown TTS provider: {provider_name}. "
            f"Valid providers: {', '.join(kind.value for kind in TTSProviderKind)}"
        )


class TTSProviderFactory:
    """
    Factory for creating TTS provider instances.
    """
    PROVIDER_REGISTRY = PROVIDER_REGISTRY

    @staticmethod
    def create_provider(
        provider_name: str,
        config: Optional[Dict[str, Any]] = None,
        settings: Optional[Settings] = None,
    ) -> BaseTTSProvider:
        """
        Create a TTS provider instance.

        Args:
            provider_name: Name of the provider (azure, elevenlabs)
            config: Optional configuration dictionary. If not provided, uses settings

        Returns:
            BaseTTSProvider: Provider instance

        Raises:
            ConfigurationError: If provider name is invalid
        """
        kind = parse_kind(provider_name)
        if config is None:
            config = TTSProviderFactory._build_config_from_settings(kind, settings or get_settings())
        provider = PROVIDER_REGISTRY[kind](config)
        logger.info(f"Created {kind.value} TTS provider (available: {provider.is_available()})")
        return provider

    @staticmethod
    def _build_config_from_settings(kind: TTSProviderKind, settings: Settings) -> Dict[str, Any]:
        base_config = {
            "timeout": settings.TTS_TIMEOUT,
            "max_text_length": 5000,
        }
        if kind == TTSProviderKind.AZURE:
            base_config.update({
                "api_key": settings.AZURE_SPEECH_KEY,
                "region": settings.AZURE_SPEECH_REGION,
            })
        elif kind == TTSProviderKind.ELEVENLABS:
            base_config.update({
                "api_key": settings.ELEVENLABS_API_KEY,
                "base_url": "https://api.elevenlabs.io/v1",
                "model_id": settings.ELEVENLABS_MODEL_ID,
            })
        return base_config

    @staticmethod
    def create_providers(settings: Optional[Settings] = None) -> List[BaseTTSProvider]:
        """All providers in the configured default order."""
        settings = settings or get_settings()
        return [
            TTSProviderFactory.create_provider(name, settings=settings)
            for name in settings.tts_provider_order
        ]

    @staticmethod
    def get_available_providers() -> List[str]:
        return [kind.value for kind in TTSProviderKind]


def build_tts_descriptors(providers: List[BaseTTSProvider]) -> List[ProviderDescriptor]:
    return [
        ProviderDescriptor(
            name=provider.name,
            is_available=provider.is_available,
            invoke=provider.synthesize,
            timeout=provider.timeout,
        )
        for provider in providers
    ]
