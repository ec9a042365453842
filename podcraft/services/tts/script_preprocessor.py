"""
Script preprocessing before speech synthesis.

Deterministic text transforms only: stage directions meant for a human reader
are removed, formal connectives are swapped for conversational ones, and a
few emphasis words are wrapped in SSML emphasis markup.
"""
import re
from typing import List, Tuple

STRONG_EMPHASIS_TAG = '<emphasis level="strong">'
MODERATE_EMPHASIS_TAG = '<emphasis level="moderate">'

STAGE_DIRECTION = re.compile(r"\[[^\]]*\]|\([^)]*\)")
EMPHASIS_MARKUP = re.compile(r"</?emphasis[^>]*>")

DISCOURSE_REWRITES: List[Tuple[str, str]] = [
    ("However,", "Well, actually,"),
    ("Therefore,", "So basically,"),
    ("Furthermore,", "And you know what else?"),
    ("Additionally,", "Plus,"),
    ("In conclusion,", "So to wrap this up,"),
    ("It is important to note", "Here's the thing"),
    ("It should be mentioned", "Oh, and by the way"),
    ("This means that", "What this basically means is"),
]

STRONG_EMPHASIS_WORDS = ("amazing", "incredible", "fantastic")
MODERATE_EMPHASIS_WORDS = ("important", "crucial", "vital")


def strip_stage_directions(text: str) -> str:
    return STAGE_DIRECTION.sub(" ", text)


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def apply_discourse_markers(text: str) -> str:
    for formal, conversational in DISCOURSE_REWRITES:
        text = re.sub(rf"\b{re.escape(formal)}", conversational, text)
    return text


def _wrap_words(text: str, words: Tuple[str, ...], tag: str) -> str:
    pattern = re.compile(rf"\b({'|'.join(words)})\b", re.IGNORECASE)
    return pattern.sub(lambda m: f"{tag}{m.group(1)}</emphasis>", text)


def add_emphasis(text: str) -> str:
    text = _wrap_words(text, STRONG_EMPHASIS_WORDS, STRONG_EMPHASIS_TAG)
    return _wrap_words(text, MODERATE_EMPHASIS_WORDS, MODERATE_EMPHASIS_TAG)


def strip_emphasis(text: str) -> str:
    """Remove emphasis markup for providers that read tags aloud."""
    return normalize_whitespace(EMPHASIS_MARKUP.sub("", text))


def preprocess_script(script: str) -> str:
    """Full preprocessing pass applied to a script before chunking."""
    text = strip_stage_directions(script)
    text = normalize_whitespace(text)
    text = apply_discourse_markers(text)
    return add_emphasis(text)
