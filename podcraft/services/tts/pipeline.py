"""
Synthesis Pipeline

Turns a podcast script into one audio artifact:

1. preprocess the script (stage directions, discourse markers, emphasis)
2. plan sentence-aware chunks
3. synthesize chunks one at a time through the provider fallback chain
4. insert a pause between consecutive chunks
5. concatenate all segments in order
6. optionally run the whole buffer through the enhancement filter graph

Chunks are processed sequentially so provider rate limits are respected and
reassembly order is simply construction order. Any chunk that fails on every
provider aborts the request; partial audio is never returned.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Sequence

from podcraft.exceptions import OperationCancelledError, ValidationError
from podcraft.services.tts.audio import (
    AudioSegment,
    SilenceGenerator,
    estimate_duration,
    reassemble,
    silence_segment,
    zero_silence,
)
from podcraft.services.tts.enhancer import AudioEnhancer
from podcraft.services.tts.script_preprocessor import preprocess_script, strip_emphasis
from podcraft.services.tts.voice_settings import derive_voice_parameters, pause_after
from podcraft.utils.chunk_planner import SYNTHESIS_CHUNK_LENGTH, TextChunk, plan_chunks
from podcraft.utils.error_classifier import ErrorClassification
from podcraft.utils.fallback_chain import (
    ChainResult,
    FallbackChainExecutor,
    ProviderDescriptor,
    build_chain,
    resolve_preferred,
)
from podcraft.utils.logger import get_logger
from podcraft.utils.retry import CancellationToken, RetryPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class SynthesisOptions:
    voice_id: Optional[str] = None
    provider_hint: Optional[str] = None
    stability_hint: Optional[float] = None
    similarity_hint: Optional[float] = None
    enhance: bool = True


@dataclass(frozen=True)
class SynthesisResult:
    success: bool
    audio: Optional[bytes] = None
    error: Optional[ErrorClassification] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view without the audio bytes."""
        return {
            "success": self.success,
            "error": self.error.to_dict() if self.error else None,
            "metadata": dict(self.metadata),
        }


class SynthesisPipeline:
    """Chunked, multi-provider speech synthesis with ordered reassembly."""

    def __init__(
        self,
        executor: FallbackChainExecutor,
        providers: Sequence[ProviderDescriptor],
        enhancer: Optional[AudioEnhancer] = None,
        policy: Optional[RetryPolicy] = None,
        max_chunk_length: int = SYNTHESIS_CHUNK_LENGTH,
        enhancement_enabled: bool = True,
        silence: SilenceGenerator = zero_silence,
    ):
        self.executor = executor
        self.providers = list(providers)
        self.enhancer = enhancer
        self.policy = policy
        self.max_chunk_length = max_chunk_length
        self.enhancement_enabled = enhancement_enabled
        self.silence = silence

    async def synthesize(
        self,
        script: str,
        options: Optional[SynthesisOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SynthesisResult:
        """
        Synthesize a full script.

        Args:
            script: Podcast script text
            options: Voice, provider hint, voice-parameter hints and enhancement flag
            cancel_token: Abandons the request (no audio is returned)

        Returns:
            SynthesisResult: audio and metadata, or the aggregated failure

        Raises:
            OperationCancelledError: If the caller cancelled the request
        """
        options = options or SynthesisOptions()
        start = time.monotonic()

        text = preprocess_script(script or "")
        chunks = plan_chunks(text, self.max_chunk_length)
        if not chunks:
            error = self.executor.classifier.classify(
                ValidationError("Script is empty after preprocessing"),
                {"operation": "synthesize"},
            )
            return self._failure(error, start, chunks=0)

        base_chain = build_chain(self.providers, options.provider_hint)
        original = resolve_preferred(base_chain, options.provider_hint)
        logger.info(
            f"🎙️ Synthesizing {len(chunks)} chunk(s) ({len(text)} chars), "
            f"preferred provider: {original}"
        )

        segments: List[AudioSegment] = []
        providers_by_chunk: List[str] = []
        attempted: List[str] = []
        sticky: Optional[str] = None

        try:
            for chunk in chunks:
                chain = base_chain if sticky in (None, original) else build_chain(base_chain, sticky)
                result = await self._synthesize_chunk(chunk, len(chunks), chain, original, options, cancel_token)
                for name in result.attempted_providers:
                    if name not in attempted:
                        attempted.append(name)

                if not result.success:
                    logger.error(
                        f"Chunk {chunk.index + 1}/{len(chunks)} failed on every provider "
                        f"({result.error.code.value}); aborting synthesis"
                    )
                    return self._failure(
                        result.error, start,
                        chunks=len(chunks),
                        failed_chunk=chunk.index,
                        attempted_providers=attempted,
                        original_provider=original,
                    )

                if result.provider != sticky and sticky is not None:
                    logger.info(f"Switching to {result.provider} from chunk {chunk.index + 1}")
                sticky = result.provider
                providers_by_chunk.append(result.provider)
                segments.append(AudioSegment(chunk.index, result.payload, estimate_duration(strip_emphasis(chunk.content))))
                if not chunk.is_final:
                    segments.append(silence_segment(pause_after(chunk), self.silence))

            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            audio = reassemble(segments)

            enhanced = False
            if self.enhancement_enabled and options.enhance and self.enhancer is not None:
                audio, enhanced = await self.enhancer.enhance(audio)
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
        except OperationCancelledError:
            logger.info(f"Synthesis cancelled; discarding {len(segments)} segment(s)")
            raise

        fallback_used = any(provider != original for provider in providers_by_chunk)
        processing_time = time.monotonic() - start
        logger.info(
            f"✅ Synthesized {len(chunks)} chunk(s) into {len(audio)} bytes in {processing_time:.2f}s "
            f"(provider: {providers_by_chunk[-1]}, fallback: {fallback_used}, enhanced: {enhanced})"
        )
        return SynthesisResult(
            success=True,
            audio=audio,
            metadata={
                "provider": providers_by_chunk[-1],
                "fallback_used": fallback_used,
                "original_provider": original,
                "providers_by_chunk": providers_by_chunk,
                "attempted_providers": attempted,
                "processing_time": round(processing_time, 3),
                "chunks": len(chunks),
                "enhanced_audio": enhanced,
                "voice": options.voice_id or "default",
                "estimated_duration": round(sum(s.duration_hint for s in segments), 1),
                "audio_bytes": len(audio),
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    async def _synthesize_chunk(
        self,
        chunk: TextChunk,
        chunk_count: int,
        chain: Sequence[ProviderDescriptor],
        original: Optional[str],
        options: SynthesisOptions,
        cancel_token: Optional[CancellationToken],
    ) -> ChainResult:
        params = derive_voice_parameters(chunk, options.stability_hint, options.similarity_hint)
        logger.debug(f"Chunk {chunk.index + 1}/{chunk_count}: {len(chunk)} chars, params={params}")
        return await self.executor.run(
            chain,
            lambda provider: partial(provider.invoke, chunk.content, options.voice_id, params),
            preferred=original,
            context={"operation": "synthesize", "chunk_index": chunk.index, "chunk_count": chunk_count},
            policy=self.policy,
            cancel_token=cancel_token,
        )

    @staticmethod
    def _failure(error: ErrorClassification, start: float, **metadata: Any) -> SynthesisResult:
        return SynthesisResult(
            success=False,
            error=error,
            metadata={
                **metadata,
                "processing_time": round(time.monotonic() - start, 3),
                "enhanced_audio": False,
            },
        )
