"""
Audio segments, silence and reassembly.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

SAMPLE_RATE = 44100
BYTES_PER_SAMPLE = 2
WORDS_PER_MINUTE = 150


@dataclass(frozen=True)
class AudioSegment:
    """
    One piece of the final audio.

    ``chunk_index`` matches the TextChunk it was synthesized from; pause
    segments have no index.
    """
    chunk_index: Optional[int]
    data: bytes
    duration_hint: float = 0.0

    @property
    def is_pause(self) -> bool:
        return self.chunk_index is None


SilenceGenerator = Callable[[float], bytes]


def zero_silence(duration: float) -> bytes:
    """Zero-filled 16-bit samples at 44.1 kHz for ``duration`` seconds."""
    return bytes(int(SAMPLE_RATE * duration) * BYTES_PER_SAMPLE)


def silence_segment(duration: float, generator: SilenceGenerator = zero_silence) -> AudioSegment:
    return AudioSegment(chunk_index=None, data=generator(duration), duration_hint=duration)


def reassemble(segments: Iterable[AudioSegment]) -> bytes:
    """Concatenate segments strictly in the given order."""
    return b"".join(segment.data for segment in segments)


def estimate_duration(text: str) -> float:
    """Spoken duration in seconds at a typical podcast pace."""
    words = len(text.split())
    return round(words / WORDS_PER_MINUTE * 60, 1)
