"""
Script generation: providers and the generation service.
"""

from podcraft.services.generation.factory import (
    GenerationProviderFactory,
    GenerationProviderKind,
    build_generation_descriptors,
)
from podcraft.services.generation.service import (
    GenerationOptions,
    GenerationResult,
    ScriptGenerationService,
)

__all__ = [
    "GenerationProviderFactory",
    "GenerationProviderKind",
    "build_generation_descriptors",
    "GenerationOptions",
    "GenerationResult",
    "ScriptGenerationService",
]
