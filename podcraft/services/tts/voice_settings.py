"""
Per-chunk voice parameters and inter-chunk pauses.

Both are small deterministic heuristics over chunk position and content.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from podcraft.services.tts.script_preprocessor import STRONG_EMPHASIS_TAG
from podcraft.utils.chunk_planner import TextChunk

DEFAULT_STABILITY = 0.6
DEFAULT_SIMILARITY = 0.8
EDGE_STABILITY = 0.8
EXPRESSIVE_STABILITY_DROP = 0.15
MIN_STABILITY = 0.3

STYLE_STRONG_EMPHASIS = 0.9
STYLE_QUESTION = 0.7
STYLE_NEUTRAL = 0.5

PAUSE_AFTER_EXCLAMATION = 1.5
PAUSE_AFTER_QUESTION = 1.0
PAUSE_DEFAULT = 0.8


@dataclass(frozen=True)
class VoiceParameters:
    stability: float = DEFAULT_STABILITY
    similarity_boost: float = DEFAULT_SIMILARITY
    style: float = STYLE_NEUTRAL
    use_speaker_boost: bool = True

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def derive_voice_parameters(
    chunk: TextChunk,
    stability_hint: Optional[float] = None,
    similarity_hint: Optional[float] = None,
) -> VoiceParameters:
    """
    Parameters for one chunk.

    The opening and closing chunks use a steadier voice; chunks carrying strong
    emphasis or a question get a more expressive, less stable delivery.
    """
    base_stability = DEFAULT_STABILITY if stability_hint is None else stability_hint
    similarity = DEFAULT_SIMILARITY if similarity_hint is None else similarity_hint

    strong_emphasis = STRONG_EMPHASIS_TAG in chunk.content
    question = "?" in chunk.content

    if chunk.index == 0 or chunk.is_final:
        stability = EDGE_STABILITY
    elif strong_emphasis or question:
        stability = max(MIN_STABILITY, base_stability - EXPRESSIVE_STABILITY_DROP)
    else:
        stability = base_stability

    if strong_emphasis:
        style = STYLE_STRONG_EMPHASIS
    elif question:
        style = STYLE_QUESTION
    else:
        style = STYLE_NEUTRAL

    return VoiceParameters(
        stability=round(stability, 2),
        similarity_boost=similarity,
        style=style,
        use_speaker_boost=True,
    )


def pause_after(chunk: TextChunk) -> float:
    """Silence in seconds to insert after ``chunk`` (longest after an exclamation)."""
    ending = chunk.content.rstrip("\"'”’)] \n\t")
    if ending.endswith("!"):
        return PAUSE_AFTER_EXCLAMATION
    if ending.endswith("?"):
        return PAUSE_AFTER_QUESTION
    return PAUSE_DEFAULT
