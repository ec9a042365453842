"""
Sentence-aware text chunking.

The same greedy algorithm serves two purposes: a coarse split that keeps
generation prompts under provider payload limits, and a fine split that keeps
each synthesis request short enough to sound natural.
"""
import re
from dataclasses import dataclass
from typing import List

GENERATION_CHUNK_LENGTH = 4000
SYNTHESIS_CHUNK_LENGTH = 500

# Terminal punctuation plus any closing quotes/brackets, followed by
# whitespace or end of text. "3.14" and "e.g.x" are not boundaries.
SENTENCE_BOUNDARY = re.compile(r"[.!?]+[\"'”’)\]]*(?=\s|$)")


@dataclass(frozen=True)
class TextChunk:
    index: int
    content: str
    is_final: bool

    def __len__(self) -> int:
        return len(self.content)


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentence segments that partition it exactly.

    ``"".join(split_sentences(text)) == text`` always holds; leading
    whitespace stays attached to the segment it precedes.
    """
    segments = []
    start = 0
    for match in SENTENCE_BOUNDARY.finditer(text):
        segments.append(text[start:match.end()])
        start = match.end()
    if start < len(text):
        segments.append(text[start:])
    return segments


def plan_chunks(text: str, max_chunk_length: int) -> List[TextChunk]:
    """
    Greedily pack sentences into chunks of at most ``max_chunk_length``.

    A sentence longer than the limit becomes a chunk of its own instead of
    being cut. Text without any terminator yields a single chunk, and empty or
    whitespace-only text yields no chunks.
    """
    if max_chunk_length < 1:
        raise ValueError("max_chunk_length must be positive")

    contents: List[str] = []
    current = ""
    for segment in split_sentences(text):
        if not segment.strip():
            current += segment
            continue
        candidate = (current + segment).strip()
        if current.strip() and len(candidate) > max_chunk_length:
            contents.append(current.strip())
            current = segment
        else:
            current += segment
    if current.strip():
        contents.append(current.strip())

    last = len(contents) - 1
    return [TextChunk(index=i, content=content, is_final=i == last) for i, content in enumerate(contents)]


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())
