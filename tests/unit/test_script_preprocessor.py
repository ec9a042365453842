"""
Unit tests for script preprocessing, per-chunk voice parameters and pauses.
"""
import pytest

from podcraft.services.tts.script_preprocessor import (
    MODERATE_EMPHASIS_TAG,
    STRONG_EMPHASIS_TAG,
    add_emphasis,
    apply_discourse_markers,
    preprocess_script,
    strip_emphasis,
    strip_stage_directions,
)
from podcraft.services.tts.voice_settings import VoiceParameters, derive_voice_parameters, pause_after
from podcraft.utils.chunk_planner import TextChunk


class TestPreprocessing:
    """Tests for the deterministic script transforms."""

    @pytest.mark.unit
    def test_stage_directions_removed(self):
        """Test bracketed and parenthesized directions are dropped."""
        text = strip_stage_directions("Welcome back [MUSIC] to the show (laughs) everyone.")
        assert "[MUSIC]" not in text
        assert "(laughs)" not in text
        assert "Welcome back" in text

    @pytest.mark.unit
    def test_discourse_markers(self):
        """Test formal connectives are rewritten conversationally."""
        text = apply_discourse_markers("However, the data is clear. In conclusion, it works.")
        assert text == "Well, actually, the data is clear. So to wrap this up, it works."

    @pytest.mark.unit
    def test_emphasis_words_wrapped(self):
        """Test strong and moderate emphasis words get SSML markup."""
        text = add_emphasis("This is amazing and important.")
        assert f"{STRONG_EMPHASIS_TAG}amazing</emphasis>" in text
        assert f"{MODERATE_EMPHASIS_TAG}important</emphasis>" in text

    @pytest.mark.unit
    def test_emphasis_respects_word_boundaries(self):
        """Test emphasis words inside other words are left alone."""
        assert add_emphasis("Unimportant details.") == "Unimportant details."

    @pytest.mark.unit
    def test_strip_emphasis(self):
        """Test markup removal restores plain text."""
        assert strip_emphasis(add_emphasis("An amazing, crucial point.")) == "An amazing, crucial point."

    @pytest.mark.unit
    def test_full_pass(self):
        """Test the combined pass normalizes whitespace and applies every transform."""
        script = "[INTRO]  Therefore,\n\n this   is   incredible. (pause)"
        assert preprocess_script(script) == f"So basically, this is {STRONG_EMPHASIS_TAG}incredible</emphasis>."

    @pytest.mark.unit
    def test_directions_only_becomes_empty(self):
        """Test a script that is only stage directions preprocesses to nothing."""
        assert preprocess_script("[MUSIC] (applause)  ") == ""


class TestVoiceParameters:
    """Tests for derive_voice_parameters."""

    @pytest.mark.unit
    def test_defaults(self):
        """Test VoiceParameters defaults."""
        params = VoiceParameters()
        assert params.to_dict() == {
            "stability": 0.6,
            "similarity_boost": 0.8,
            "style": 0.5,
            "use_speaker_boost": True,
        }

    @pytest.mark.unit
    def test_first_and_last_chunks_are_steady(self):
        """Test opening and closing chunks use stability 0.8."""
        assert derive_voice_parameters(TextChunk(0, "Hello.", False)).stability == 0.8
        assert derive_voice_parameters(TextChunk(4, "Bye.", True)).stability == 0.8

    @pytest.mark.unit
    def test_middle_question_is_expressive(self):
        """Test a middle question lowers stability and raises style."""
        params = derive_voice_parameters(TextChunk(2, "Why does this matter?", False))
        assert params.stability == 0.45
        assert params.style == 0.7

    @pytest.mark.unit
    def test_middle_strong_emphasis(self):
        """Test strong emphasis gives the most expressive style."""
        params = derive_voice_parameters(TextChunk(1, f"This is {STRONG_EMPHASIS_TAG}amazing</emphasis>.", False))
        assert params.stability == 0.45
        assert params.style == 0.9

    @pytest.mark.unit
    def test_plain_middle_chunk_uses_hints(self):
        """Test caller hints drive a neutral middle chunk."""
        params = derive_voice_parameters(TextChunk(1, "Plain text.", False), stability_hint=0.5, similarity_hint=0.9)
        assert params.stability == 0.5
        assert params.similarity_boost == 0.9
        assert params.style == 0.5

    @pytest.mark.unit
    def test_stability_floor(self):
        """Test stability never drops below 0.3."""
        params = derive_voice_parameters(TextChunk(1, "Really?", False), stability_hint=0.35)
        assert params.stability == 0.3


class TestPauses:
    """Tests for pause_after."""

    @pytest.mark.unit
    @pytest.mark.parametrize("content,expected", [
        ("What a day!", 1.5),
        ("Is it though?", 1.0),
        ("It is.", 0.8),
        ('He shouted "stop!"', 1.5),
    ])
    def test_pause_by_ending(self, content, expected):
        """Test pause length depends on the chunk's final punctuation."""
        assert pause_after(TextChunk(0, content, False)) == expected
