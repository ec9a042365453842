"""
Integration tests for the synthesis pipeline.

Real chunk planning, retry and fallback run against fake providers; only the
provider calls and the ffmpeg subprocess are replaced.
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from podcraft.exceptions import OperationCancelledError, ProviderAuthError
from podcraft.services.tts.enhancer import AudioEnhancer
from podcraft.services.tts.pipeline import SynthesisOptions, SynthesisPipeline
from podcraft.utils.error_classifier import ErrorCode
from podcraft.utils.retry import CancellationToken

# Three sentences that cannot share a 25-char chunk.
SCRIPT = "The river runs north. Birds sing at dawn. Snow falls in winter."
PAUSE = b"|"


async def echo(text, voice_id=None, params=None):
    return f"[{text}]".encode()


def failing_on(marker, error):
    async def invoke(text, voice_id=None, params=None):
        if marker in text:
            raise error
        return f"[{text}]".encode()
    return invoke


def build_pipeline(executor, providers, fast_policy, **kwargs):
    kwargs.setdefault("enhancement_enabled", False)
    return SynthesisPipeline(
        executor,
        providers,
        policy=fast_policy,
        max_chunk_length=25,
        silence=lambda duration: PAUSE,
        **kwargs,
    )


class TestSynthesisPipeline:
    """End-to-end behaviour of SynthesisPipeline.synthesize."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_chunks_reassembled_in_order(self, executor, make_provider, fast_policy):
        """Test audio is chunk audio joined by pauses, in script order."""
        a = make_provider("a", side_effect=echo)
        pipeline = build_pipeline(executor, [a], fast_policy)

        result = await pipeline.synthesize(SCRIPT, SynthesisOptions(voice_id="rachel"))

        assert result.success is True
        assert result.audio == b"[The river runs north.]|[Birds sing at dawn.]|[Snow falls in winter.]"
        assert result.metadata["chunks"] == 3
        assert result.metadata["providers_by_chunk"] == ["a", "a", "a"]
        assert result.metadata["fallback_used"] is False
        assert result.metadata["voice"] == "rachel"
        assert result.metadata["audio_bytes"] == len(result.audio)
        assert a.invoke.call_count == 3
        first_call = a.invoke.call_args_list[0].args
        assert first_call[1] == "rachel"
        assert first_call[2].stability == 0.8

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_fallback_is_sticky(self, executor, make_provider, fast_policy):
        """Test later chunks start with the provider that last succeeded."""
        a = make_provider("a", side_effect=failing_on("Birds", ProviderAuthError("revoked", "a", 401)))
        b = make_provider("b", side_effect=echo)
        pipeline = build_pipeline(executor, [a, b], fast_policy)

        result = await pipeline.synthesize(SCRIPT)

        assert result.success is True
        assert result.metadata["providers_by_chunk"] == ["a", "b", "b"]
        assert result.metadata["provider"] == "b"
        assert result.metadata["original_provider"] == "a"
        assert result.metadata["fallback_used"] is True
        assert result.metadata["attempted_providers"] == ["a", "b"]
        sent_to_a = [call.args[0] for call in a.invoke.call_args_list]
        assert sent_to_a == ["The river runs north.", "Birds sing at dawn."]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_failed_chunk_aborts_request(self, executor, make_provider, fast_policy):
        """Test no partial audio is returned when a chunk fails everywhere."""
        a = make_provider("a", side_effect=failing_on("Birds", ProviderAuthError("revoked", "a", 401)))
        b = make_provider("b", side_effect=failing_on("Birds", ProviderAuthError("revoked", "b", 401)))
        pipeline = build_pipeline(executor, [a, b], fast_policy)

        result = await pipeline.synthesize(SCRIPT)

        assert result.success is False
        assert result.audio is None
        assert result.error.code == ErrorCode.AUTH_ERROR
        assert result.metadata["failed_chunk"] == 1
        assert result.metadata["attempted_providers"] == ["a", "b"]
        assert result.metadata["enhanced_audio"] is False
        sent = [call.args[0] for call in a.invoke.call_args_list + b.invoke.call_args_list]
        assert "Snow falls in winter." not in sent

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_slow_provider_times_out_and_falls_back(self, executor, make_provider, fast_policy, no_sleep):
        """Test per-attempt timeouts are retried, then the next provider is used."""
        async def hang(text, voice_id=None, params=None):
            await asyncio.sleep(1)

        slow = make_provider("slow", side_effect=hang, timeout=0.01)
        fast = make_provider("fast", side_effect=echo)
        pipeline = build_pipeline(executor, [slow, fast], fast_policy)

        result = await pipeline.synthesize("Just one sentence.")

        assert result.success is True
        assert result.metadata["provider"] == "fast"
        assert slow.invoke.call_count == fast_policy.max_retries + 1
        assert no_sleep.await_count == fast_policy.max_retries

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_no_available_provider(self, executor, make_provider, fast_policy):
        """Test a chain with nothing configured fails as service unavailable."""
        pipeline = build_pipeline(executor, [make_provider("a", available=False)], fast_policy)
        result = await pipeline.synthesize(SCRIPT)
        assert result.success is False
        assert result.error.code == ErrorCode.SERVICE_UNAVAILABLE

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_empty_script(self, executor, make_provider, fast_policy):
        """Test a script of stage directions only is a validation failure."""
        a = make_provider("a", side_effect=echo)
        result = await build_pipeline(executor, [a], fast_policy).synthesize("[MUSIC] (applause)")
        assert result.success is False
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.metadata["chunks"] == 0
        a.invoke.assert_not_called()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_provider_hint_reorders_chain(self, executor, make_provider, fast_policy):
        """Test an explicit provider hint is tried first and is the original provider."""
        a = make_provider("a", side_effect=echo)
        b = make_provider("b", side_effect=echo)
        result = await build_pipeline(executor, [a, b], fast_policy).synthesize(
            SCRIPT, SynthesisOptions(provider_hint="b")
        )
        assert result.metadata["providers_by_chunk"] == ["b", "b", "b"]
        assert result.metadata["original_provider"] == "b"
        assert result.metadata["fallback_used"] is False
        a.invoke.assert_not_called()


class TestEnhancement:
    """Enhancement toggles and failure handling."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_enhanced_audio_returned(self, executor, make_provider, fast_policy):
        """Test the enhancer output replaces the reassembled buffer."""
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(return_value=(b"enhanced", True))
        pipeline = build_pipeline(
            executor, [make_provider("a", side_effect=echo)], fast_policy,
            enhancer=enhancer, enhancement_enabled=True,
        )

        result = await pipeline.synthesize(SCRIPT)

        assert result.audio == b"enhanced"
        assert result.metadata["enhanced_audio"] is True
        enhancer.enhance.assert_awaited_once()
        assert enhancer.enhance.call_args.args[0].startswith(b"[The river runs north.]|")

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize("setting_enabled,request_enabled", [(False, True), (True, False)])
    async def test_enhancement_needs_both_flags(
        self, executor, make_provider, fast_policy, setting_enabled, request_enabled
    ):
        """Test enhancement runs only when enabled in settings and requested."""
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(return_value=(b"enhanced", True))
        pipeline = build_pipeline(
            executor, [make_provider("a", side_effect=echo)], fast_policy,
            enhancer=enhancer, enhancement_enabled=setting_enabled,
        )

        result = await pipeline.synthesize(SCRIPT, SynthesisOptions(enhance=request_enabled))

        assert result.metadata["enhanced_audio"] is False
        assert result.audio.startswith(b"[The river")
        enhancer.enhance.assert_not_called()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_enhancement_failure_is_not_fatal(self, executor, make_provider, fast_policy):
        """Test a broken ffmpeg leaves the unenhanced audio in place."""
        pipeline = build_pipeline(
            executor, [make_provider("a", side_effect=echo)], fast_policy,
            enhancer=AudioEnhancer(ffmpeg_path="/missing/ffmpeg"), enhancement_enabled=True,
        )
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("ffmpeg"))):
            result = await pipeline.synthesize(SCRIPT)

        assert result.success is True
        assert result.metadata["enhanced_audio"] is False
        assert result.audio == b"[The river runs north.]|[Birds sing at dawn.]|[Snow falls in winter.]"


class TestCancellation:
    """Caller cancellation."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cancel_mid_request(self, executor, make_provider, fast_policy):
        """Test cancelling after the first chunk stops further provider calls."""
        token = CancellationToken()

        async def cancel_after_first(text, voice_id=None, params=None):
            token.cancel("client disconnected")
            return b"audio"

        a = make_provider("a", side_effect=cancel_after_first)
        pipeline = build_pipeline(executor, [a], fast_policy)

        with pytest.raises(OperationCancelledError, match="client disconnected"):
            await pipeline.synthesize(SCRIPT, cancel_token=token)
        assert a.invoke.call_count == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cancel_before_start(self, executor, make_provider, fast_policy):
        """Test an already-cancelled token prevents any synthesis."""
        token = CancellationToken()
        token.cancel()
        a = make_provider("a", side_effect=echo)
        with pytest.raises(OperationCancelledError):
            await build_pipeline(executor, [a], fast_policy).synthesize(SCRIPT, cancel_token=token)
        a.invoke.assert_not_called()


class TestEndToEndScenarios:
    """Reference scenarios for the synthesis core."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_1200_char_script_three_chunks(self, executor, make_provider, fast_policy):
        """Test a 1200-character script at 500 per chunk synthesizes as three chunks."""
        script = " ".join(["a" * 98 + "."] * 12)
        a = make_provider("a", side_effect=echo)
        pipeline = SynthesisPipeline(executor, [a], policy=fast_policy, enhancement_enabled=False)

        result = await pipeline.synthesize(script)

        assert result.success is True
        assert result.metadata["chunks"] == 3
        assert result.metadata["fallback_used"] is False
        assert a.invoke.call_count == 3

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unavailable_preferred_provider(self, executor, make_provider, fast_policy):
        """Test an unavailable head provider is skipped and reported as a fallback."""
        a = make_provider("A", side_effect=echo, available=False)
        b = make_provider("B", side_effect=echo)

        result = await build_pipeline(executor, [a, b], fast_policy).synthesize("Hello there.")

        assert result.success is True
        assert result.metadata["provider"] == "B"
        assert result.metadata["fallback_used"] is True
        a.invoke.assert_not_called()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_all_providers_exhausted(self, executor, make_provider, fast_policy):
        """Test exhaustion carries the last code and a displayable suggestion."""
        a = make_provider("A", side_effect=ProviderAuthError("revoked", "A", 401))
        b = make_provider("B", side_effect=ProviderAuthError("revoked", "B", 401))

        result = await build_pipeline(executor, [a, b], fast_policy).synthesize("Hello there.")

        assert result.success is False
        assert result.error.code == ErrorCode.AUTH_ERROR
        assert result.error.suggestion

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_mixed_case_provider_hint(self, executor, make_provider, fast_policy):
        """Test a provider hint is matched regardless of case."""
        azure = make_provider("azure", side_effect=echo)
        elevenlabs = make_provider("elevenlabs", side_effect=echo)

        result = await build_pipeline(executor, [azure, elevenlabs], fast_policy).synthesize(
            SCRIPT, SynthesisOptions(provider_hint="ElevenLabs")
        )

        assert result.metadata["provider"] == "elevenlabs"
        assert result.metadata["original_provider"] == "elevenlabs"
        assert result.metadata["fallback_used"] is False
        azure.invoke.assert_not_called()
