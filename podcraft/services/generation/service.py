"""
Script Generation Service

Generates a podcast script from source content through the generation
provider chain. Long content is split into coarse parts that each fit a
provider request; parts are generated in order and joined.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from podcraft.exceptions import ValidationError
from podcraft.services.generation.script_processing import ProcessedScript, process_generated_script
from podcraft.utils.chunk_planner import GENERATION_CHUNK_LENGTH, plan_chunks
from podcraft.utils.error_classifier import ErrorClassification
from podcraft.utils.fallback_chain import FallbackChainExecutor, ProviderDescriptor, build_chain, resolve_preferred
from podcraft.utils.logger import get_logger
from podcraft.utils.prompt_templates import PromptTemplates
from podcraft.utils.retry import CancellationToken, RetryPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class GenerationOptions:
    style: str = "conversational"
    duration: str = "medium"
    tone: str = "friendly"
    audience: str = "general"
    provider_hint: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    script: Optional[str] = None
    sections: List[Dict[str, str]] = field(default_factory=list)
    error: Optional[ErrorClassification] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "script": self.script,
            "sections": list(self.sections),
            "error": self.error.to_dict() if self.error else None,
            "metadata": dict(self.metadata),
        }


class ScriptGenerationService:
    """Script generation over the provider fallback chain."""

    def __init__(
        self,
        executor: FallbackChainExecutor,
        providers: Sequence[ProviderDescriptor],
        policy: Optional[RetryPolicy] = None,
        max_chunk_length: int = GENERATION_CHUNK_LENGTH,
    ):
        self.executor = executor
        self.providers = list(providers)
        self.policy = policy
        self.max_chunk_length = max_chunk_length

    async def generate_script(
        self,
        content: str,
        options: Optional[GenerationOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        options = options or GenerationOptions()
        start = time.monotonic()

        parts = plan_chunks(content or "", self.max_chunk_length)
        if not parts:
            error = self.executor.classifier.classify(
                ValidationError("Content is required for script generation"),
                {"operation": "generate_script"},
            )
            return self._failure(error, start, options)

        base_chain = build_chain(self.providers, options.provider_hint)
        original = resolve_preferred(base_chain, options.provider_hint)
        logger.info(f"📝 Generating script from {len(content)} chars in {len(parts)} part(s)")

        scripts: List[str] = []
        used: List[str] = []
        attempted: List[str] = []
        for part in parts:
            sticky = used[-1] if used else None
            chain = base_chain if sticky in (None, original) else build_chain(base_chain, sticky)
            prompt = PromptTemplates.get_script_prompt(
                part.content,
                style=options.style,
                duration=options.duration,
                tone=options.tone,
                audience=options.audience,
                part=part.index + 1,
                total_parts=len(parts),
            )
            result = await self.executor.run(
                chain,
                lambda provider, prompt=prompt: self._generate_part(provider, prompt),
                preferred=original,
                context={"operation": "generate_script", "part": part.index + 1, "parts": len(parts)},
                policy=self.policy,
                cancel_token=cancel_token,
            )
            attempted.extend(name for name in result.attempted_providers if name not in attempted)
            if not result.success:
                return self._failure(
                    result.error, start, options,
                    attempted_providers=attempted,
                    original_provider=original,
                    failed_part=part.index,
                )
            used.append(result.provider)
            scripts.append(result.payload.script)

        processed = process_generated_script("\n\n".join(scripts), used[-1])
        processing_time = time.monotonic() - start
        fallback_used = any(name != original for name in used)
        logger.info(
            f"✅ Generated script with {processed.word_count} words via {used[-1]} "
            f"in {processing_time:.2f}s (fallback: {fallback_used})"
        )
        return GenerationResult(
            success=True,
            script=processed.script,
            sections=processed.sections,
            metadata={
                "provider": used[-1],
                "fallback_used": fallback_used,
                "original_provider": original,
                "attempted_providers": attempted,
                "processing_time": round(processing_time, 3),
                "parts": len(parts),
                "word_count": processed.word_count,
                "estimated_duration": f"{processed.estimated_minutes} minutes",
                "style": options.style,
                "audience": options.audience,
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    @staticmethod
    def _generate_part(provider: ProviderDescriptor, prompt: str):
        async def attempt() -> ProcessedScript:
            raw = await provider.invoke(prompt)
            return process_generated_script(raw, provider.name)
        return attempt

    @staticmethod
    def _failure(
        error: ErrorClassification, start: float, options: GenerationOptions, **metadata: Any
    ) -> GenerationResult:
        return GenerationResult(
            success=False,
            error=error,
            metadata={
                **metadata,
                "processing_time": round(time.monotonic() - start, 3),
                "style": options.style,
                "audience": options.audience,
            },
        )
