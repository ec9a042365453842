"""
Speech synthesis: providers, voice mapping and the chunked synthesis pipeline.
"""

from podcraft.services.tts.base import BaseTTSProvider
from podcraft.services.tts.azure import AzureTTSProvider
from podcraft.services.tts.elevenlabs import ElevenLabsTTSProvider
from podcraft.services.tts.factory import (
    TTSProviderFactory,
    TTSProviderKind,
    build_tts_descriptors,
)
from podcraft.services.tts.pipeline import (
    SynthesisOptions,
    SynthesisPipeline,
    SynthesisResult,
)

__all__ = [
    "BaseTTSProvider",
    "AzureTTSProvider",
    "ElevenLabsTTSProvider",
    "TTSProviderFactory",
    "TTSProviderKind",
    "build_tts_descriptors",
    "SynthesisOptions",
    "SynthesisPipeline",
    "SynthesisResult",
]
