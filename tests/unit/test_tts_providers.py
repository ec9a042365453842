"""
Unit tests for TTS provider implementations.

Tests the Azure and ElevenLabs providers with mocked HTTP calls, the provider
factory, and the HTTP status mapping shared by all providers.
"""
import pytest
from unittest.mock import AsyncMock, patch
import httpx

from podcraft.config import Settings
from podcraft.exceptions import (
    AutomationBlockedError,
    ConfigurationError,
    ContentPolicyError,
    InvalidResponseError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from podcraft.services.tts.azure import AzureTTSProvider, build_ssml
from podcraft.services.tts.elevenlabs import ElevenLabsTTSProvider
from podcraft.services.tts.factory import TTSProviderFactory, build_tts_descriptors
from podcraft.services.tts.script_preprocessor import STRONG_EMPHASIS_TAG
from podcraft.services.tts.voice_settings import VoiceParameters
from podcraft.services.tts.voices import VOICE_MAP
from podcraft.utils.http_client import raise_for_provider_status, translate_transport_error


def elevenlabs_provider(**overrides):
    config = {"api_key": "test-api-key", "base_url": "https://api.elevenlabs.io/v1", "timeout": 30}
    config.update(overrides)
    return ElevenLabsTTSProvider(config)


def azure_provider(**overrides):
    config = {"api_key": "azure-key", "region": "eastus", "timeout": 30}
    config.update(overrides)
    return AzureTTSProvider(config)


class TestElevenLabsTTSProvider:
    """Tests for ElevenLabsTTSProvider."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_success(self):
        """Test successful synthesis with ElevenLabs provider."""
        provider = elevenlabs_provider()
        mock_response = httpx.Response(200, content=b"fake_audio_data")

        with patch("httpx.AsyncClient") as mock_client:
            mock_post = AsyncMock(return_value=mock_response)
            mock_client.return_value.__aenter__.return_value.post = mock_post

            audio_data = await provider.synthesize("Hello world", "rachel", VoiceParameters(stability=0.45))

        assert audio_data == b"fake_audio_data"
        url = mock_post.call_args.args[0]
        assert url.endswith(f"/text-to-speech/{VOICE_MAP['rachel']['elevenlabs']}")
        payload = mock_post.call_args.kwargs["json"]
        assert payload["voice_settings"]["stability"] == 0.45
        assert mock_post.call_args.kwargs["headers"]["xi-api-key"] == "test-api-key"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_emphasis_markup_stripped(self):
        """Test SSML emphasis is removed before text is sent."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_post = AsyncMock(return_value=httpx.Response(200, content=b"audio"))
            mock_client.return_value.__aenter__.return_value.post = mock_post
            await provider.synthesize(f"This is {STRONG_EMPHASIS_TAG}amazing</emphasis>.")
        assert mock_post.call_args.kwargs["json"]["text"] == "This is amazing."

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_timeout(self):
        """Test timeout handling in ElevenLabs provider."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.TimeoutException("Request timed out")
            )
            with pytest.raises(ProviderTimeoutError):
                await provider.synthesize("Hello world")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_rate_limit(self):
        """Test 429 maps to ProviderRateLimitError."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=httpx.Response(429, json={"detail": {"message": "Too many requests"}})
            )
            with pytest.raises(ProviderRateLimitError):
                await provider.synthesize("Hello world")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_auth_error(self):
        """Test 401 maps to ProviderAuthError."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=httpx.Response(401, json={"detail": "invalid key"})
            )
            with pytest.raises(ProviderAuthError):
                await provider.synthesize("Hello world")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_audio_rejected(self):
        """Test an empty 200 response is an invalid response."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=httpx.Response(200, content=b"")
            )
            with pytest.raises(InvalidResponseError):
                await provider.synthesize("Hello world")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        """Test a provider without a key is unavailable and refuses to call out."""
        provider = elevenlabs_provider(api_key="")
        assert provider.is_available() is False
        with patch("httpx.AsyncClient") as mock_client:
            with pytest.raises(ProviderAuthError):
                await provider.synthesize("Hello world")
            mock_client.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_invalid_text(self):
        """Test validation of empty and oversized text input."""
        provider = elevenlabs_provider(max_text_length=10)
        with pytest.raises(InvalidResponseError, match="invalid text input"):
            await provider.synthesize("")
        with pytest.raises(InvalidResponseError, match="exceeds"):
            await provider.synthesize("This text is far too long.")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_health_check(self):
        """Test health check success and failure."""
        provider = elevenlabs_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=httpx.Response(200))
            assert await provider.health_check() is True
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("Connection error")
            )
            assert await provider.health_check() is False


class TestAzureTTSProvider:
    """Tests for AzureTTSProvider."""

    @pytest.mark.unit
    def test_availability_requires_key_and_region(self):
        """Test Azure needs both credentials."""
        assert azure_provider().is_available() is True
        assert azure_provider(region="").is_available() is False
        assert azure_provider(api_key="").is_available() is False

    @pytest.mark.unit
    def test_build_ssml_keeps_emphasis_and_escapes_text(self):
        """Test SSML escapes user text but keeps emphasis tags."""
        ssml = build_ssml(f"Cats & dogs are {STRONG_EMPHASIS_TAG}amazing</emphasis> <3", "en-US-AvaNeural", VoiceParameters())
        assert "Cats &amp; dogs" in ssml
        assert f"{STRONG_EMPHASIS_TAG}amazing</emphasis>" in ssml
        assert "&lt;3" in ssml
        assert '<voice name="en-US-AvaNeural">' in ssml

    @pytest.mark.unit
    def test_low_stability_speeds_up_prosody(self):
        """Test expressive chunks get a faster rate."""
        assert 'rate="+5%"' in build_ssml("Hi.", "v", VoiceParameters(stability=0.45))
        assert 'rate="0%"' in build_ssml("Hi.", "v", VoiceParameters(stability=0.8))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_synthesize_success(self):
        """Test successful synthesis posts SSML to the regional endpoint."""
        provider = azure_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_post = AsyncMock(return_value=httpx.Response(200, content=b"azure_audio"))
            mock_client.return_value.__aenter__.return_value.post = mock_post
            audio = await provider.synthesize("Hello world", "adam")

        assert audio == b"azure_audio"
        assert mock_post.call_args.args[0] == "https://eastus.tts.speech.microsoft.com/cognitiveservices/v1"
        body = mock_post.call_args.kwargs["content"].decode("utf-8")
        assert VOICE_MAP["adam"]["azure"] in body
        assert mock_post.call_args.kwargs["headers"]["Ocp-Apim-Subscription-Key"] == "azure-key"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test transport failures map to ProviderConnectionError."""
        provider = azure_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("Name or service not known")
            )
            with pytest.raises(ProviderConnectionError):
                await provider.synthesize("Hello world")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forbidden_is_auth_error(self):
        """Test Azure treats 403 as rejected credentials."""
        provider = azure_provider()
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(return_value=httpx.Response(403))
            with pytest.raises(ProviderAuthError):
                await provider.synthesize("Hello world")


class TestProviderStatusMapping:
    """Tests for raise_for_provider_status and translate_transport_error."""

    @pytest.mark.unit
    def test_success_passes(self):
        """Test 2xx responses do not raise."""
        raise_for_provider_status(httpx.Response(204), "x")

    @pytest.mark.unit
    @pytest.mark.parametrize("status,body,expected", [
        (401, {}, ProviderAuthError),
        (429, {}, ProviderRateLimitError),
        (408, {}, ProviderTimeoutError),
        (504, {}, ProviderTimeoutError),
        (451, {}, ContentPolicyError),
        (400, {"error": {"message": "Rejected by safety system"}}, ContentPolicyError),
        (500, {}, ProviderError),
    ])
    def test_status_mapping(self, status, body, expected):
        """Test each status class maps to its provider exception."""
        with pytest.raises(expected) as exc_info:
            raise_for_provider_status(httpx.Response(status, json=body), "x")
        assert exc_info.value.status_code == status

    @pytest.mark.unit
    def test_blocked_statuses(self):
        """Test configured blocked statuses raise AutomationBlockedError."""
        with pytest.raises(AutomationBlockedError):
            raise_for_provider_status(httpx.Response(403), "site", auth_statuses=(401,), blocked_statuses=(403,))

    @pytest.mark.unit
    def test_transport_errors(self):
        """Test httpx timeouts and connection failures are translated."""
        assert isinstance(translate_transport_error(httpx.ReadTimeout("slow"), "x"), ProviderTimeoutError)
        assert isinstance(translate_transport_error(httpx.ConnectError("down"), "x"), ProviderConnectionError)


class TestTTSProviderFactory:
    """Tests for TTSProviderFactory."""

    @pytest.mark.unit
    def test_create_providers_in_configured_order(self):
        """Test providers follow TTS_PROVIDER_ORDER."""
        settings = Settings()
        settings.TTS_PROVIDER_ORDER = "elevenlabs,azure"
        providers = TTSProviderFactory.create_providers(settings)
        assert [p.name for p in providers] == ["elevenlabs", "azure"]

    @pytest.mark.unit
    def test_unknown_provider(self):
        """Test an unknown name is a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown TTS provider"):
            TTSProviderFactory.create_provider("coqui", config={})

    @pytest.mark.unit
    def test_descriptors(self):
        """Test descriptors bind name, availability, invoke and timeout."""
        provider = elevenlabs_provider(timeout=12)
        descriptor = build_tts_descriptors([provider])[0]
        assert descriptor.name == "elevenlabs"
        assert descriptor.timeout == 12
        assert descriptor.is_available() is True
        assert descriptor.invoke == provider.synthesize
