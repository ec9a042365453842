"""
Post-processing for generated scripts.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List

from podcraft.exceptions import InvalidResponseError

MIN_SCRIPT_LENGTH = 100
WORDS_PER_MINUTE = 150

SECTION_MARKER = re.compile(
    r"\[(INTRO|MAIN CONTENT|BODY|SEGMENT \d+|CONCLUSION|OUTRO|ENDING)\]",
    re.IGNORECASE,
)
SECTION_TYPES = {
    "intro": "intro",
    "main content": "main",
    "body": "main",
    "conclusion": "conclusion",
    "outro": "conclusion",
    "ending": "conclusion",
}


@dataclass(frozen=True)
class ProcessedScript:
    script: str
    word_count: int
    estimated_minutes: int
    sections: List[Dict[str, str]] = field(default_factory=list)


def clean_markdown(script: str) -> str:
    """Strip markdown left behind by models and tidy whitespace, keeping paragraphs."""
    text = re.sub(r"\*\*(.*?)\*\*", r"\1", script)
    text = re.sub(r"\*(.*?)\*", r"\1", text)
    text = re.sub(r"__(.*?)__", r"\1", text)
    text = re.sub(r"^\s*#{1,6}\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*(?:[-*+]|\d+\.)\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _section_type(marker: str) -> str:
    marker = marker.lower()
    if marker.startswith("segment"):
        return "main"
    return SECTION_TYPES.get(marker, "content")


def extract_sections(script: str) -> List[Dict[str, str]]:
    """
    Split a script into intro/main/conclusion sections.

    Explicit section markers win; otherwise paragraphs are split into thirds.
    """
    markers = list(SECTION_MARKER.finditer(script))
    if markers:
        sections = []
        for i, marker in enumerate(markers):
            end = markers[i + 1].start() if i + 1 < len(markers) else len(script)
            content = script[marker.end():end].strip()
            if content:
                sections.append({"type": _section_type(marker.group(1)), "content": content})
        if sections:
            return sections

    paragraphs = [p.strip() for p in script.split("\n\n") if p.strip()]
    if len(paragraphs) < 3:
        return [{"type": "content", "content": script}]
    third = len(paragraphs) // 3
    return [
        {"type": "intro", "content": "\n\n".join(paragraphs[:third])},
        {"type": "main", "content": "\n\n".join(paragraphs[third:-third])},
        {"type": "conclusion", "content": "\n\n".join(paragraphs[-third:])},
    ]


def process_generated_script(raw: str, provider: str = "unknown") -> ProcessedScript:
    """
    Clean and measure a generated script.

    Raises:
        InvalidResponseError: If the script is empty or too short to be usable
    """
    script = clean_markdown(raw or "")
    if len(script) < MIN_SCRIPT_LENGTH:
        raise InvalidResponseError(
            f"Generated script was too short ({len(script)} chars, minimum {MIN_SCRIPT_LENGTH})",
            provider,
        )
    word_count = len(script.split())
    return ProcessedScript(
        script=script,
        word_count=word_count,
        estimated_minutes=max(1, math.ceil(word_count / WORDS_PER_MINUTE)),
        sections=extract_sections(script),
    )
