"""
Dependency injection utilities for Podcraft.

The error log is the only state shared across requests; everything built here
on top of it is stateless between calls, so instances are cached per process.
"""

from functools import lru_cache
from podcraft.config import get_settings
from podcraft.services.generation import (
    GenerationProviderFactory,
    ScriptGenerationService,
    build_generation_descriptors,
)
from podcraft.services.scraping import ScrapeProviderFactory, ScrapeService, build_scrape_descriptors
from podcraft.services.storage import AudioStore, LocalAudioStore
from podcraft.services.tts import SynthesisPipeline, TTSProviderFactory, build_tts_descriptors
from podcraft.services.tts.enhancer import AudioEnhancer
from podcraft.utils.error_classifier import ErrorClassifier, ErrorLog
from podcraft.utils.fallback_chain import FallbackChainExecutor
from podcraft.utils.logger import get_logger
from podcraft.utils.retry import RetryController, RetryPolicy

logger = get_logger(__name__)


@lru_cache()
def get_error_classifier() -> ErrorClassifier:
    """Process-wide classifier backed by the shared error ring log."""
    settings = get_settings()
    return ErrorClassifier(ErrorLog(capacity=settings.ERROR_LOG_CAPACITY))


@lru_cache()
def get_fallback_executor() -> FallbackChainExecutor:
    return FallbackChainExecutor(RetryController(get_error_classifier()))


@lru_cache()
def get_synthesis_pipeline() -> SynthesisPipeline:
    settings = get_settings()
    providers = TTSProviderFactory.create_providers(settings)
    logger.info(f"TTS chain: {', '.join(p.name for p in providers)}")
    return SynthesisPipeline(
        get_fallback_executor(),
        build_tts_descriptors(providers),
        enhancer=AudioEnhancer(settings.FFMPEG_PATH, settings.FFMPEG_TIMEOUT),
        policy=RetryPolicy.for_operation("tts", settings),
        max_chunk_length=settings.SYNTHESIS_CHUNK_LENGTH,
        enhancement_enabled=settings.AUDIO_ENHANCEMENT_ENABLED,
    )


@lru_cache()
def get_generation_service() -> ScriptGenerationService:
    settings = get_settings()
    providers = GenerationProviderFactory.create_providers(settings)
    logger.info(f"Generation chain: {', '.join(p.name for p in providers)}")
    return ScriptGenerationService(
        get_fallback_executor(),
        build_generation_descriptors(providers),
        policy=RetryPolicy.for_operation("generation", settings),
        max_chunk_length=settings.GENERATION_CHUNK_LENGTH,
    )


@lru_cache()
def get_scrape_service() -> ScrapeService:
    settings = get_settings()
    providers = ScrapeProviderFactory.create_providers(settings)
    logger.info(f"Scrape chain: {', '.join(p.name for p in providers)}")
    return ScrapeService(
        get_fallback_executor(),
        build_scrape_descriptors(providers),
        policy=RetryPolicy.for_operation("scrape", settings),
    )


@lru_cache()
def get_audio_store() -> AudioStore:
    settings = get_settings()
    return LocalAudioStore(settings.AUDIO_OUTPUT_DIR, settings.AUDIO_URL_PREFIX)
