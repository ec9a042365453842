"""
Centralized prompt templates for script generation.
"""

from typing import Optional


class PromptTemplates:
    """Prompt templates shared by all generation providers."""

    STYLE_GUIDANCE = {
        "conversational": "Write as a warm, relaxed host talking to a friend.",
        "professional": "Write as a polished, authoritative presenter.",
        "educational": "Write as a clear teacher who explains step by step with examples.",
        "entertaining": "Write as an energetic storyteller with humour and vivid hooks.",
    }

    DURATION_WORDS = {
        "short": 450,
        "medium": 900,
        "long": 1800,
    }

    TONE_GUIDANCE = {
        "friendly": "friendly and approachable",
        "formal": "measured and formal",
        "humorous": "light-hearted and funny",
        "dramatic": "suspenseful and dramatic",
    }

    @staticmethod
    def get_script_prompt(
        content: str,
        style: str = "conversational",
        duration: str = "medium",
        tone: str = "friendly",
        audience: str = "general",
        part: Optional[int] = None,
        total_parts: Optional[int] = None,
    ) -> str:
        """Build the user prompt for one piece of source content."""
        style_note = PromptTemplates.STYLE_GUIDANCE.get(style, PromptTemplates.STYLE_GUIDANCE["conversational"])
        tone_note = PromptTemplates.TONE_GUIDANCE.get(tone, PromptTemplates.TONE_GUIDANCE["friendly"])
        words = PromptTemplates.DURATION_WORDS.get(duration, PromptTemplates.DURATION_WORDS["medium"])

        if part is not None and total_parts and total_parts > 1:
            words = max(150, words // total_parts)
            if part == 1:
                position = "This is the opening segment: include an intro hook but no conclusion."
            elif part == total_parts:
                position = "This is the final segment: continue naturally and end with a conclusion."
            else:
                position = "This is a middle segment: no intro and no conclusion, just continue the story."
            segment_note = f"\nSegment {part} of {total_parts}. {position}\n"
        else:
            segment_note = "\nInclude an intro hook, the main discussion and a memorable conclusion.\n"

        return f"""
        Turn the following source material into a podcast script of about {words} words.

        Style: {style_note}
        Tone: {tone_note}
        Audience: {audience}
        {segment_note}
        Write only the words the host speaks. Mark sections with [INTRO], [MAIN CONTENT] and
        [CONCLUSION] where they apply. Do not use markdown.

        Source material:
        {content}
        """
