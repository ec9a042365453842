import os
from dotenv import load_dotenv
from typing import Dict, List, Any
from functools import lru_cache

load_dotenv()


def _split_list(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings:
    # Application
    APP_NAME: str = os.getenv("APP_NAME", "Podcraft API")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")
    CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    # Speech synthesis providers
    AZURE_SPEECH_KEY: str = os.getenv("AZURE_SPEECH_KEY", "")
    AZURE_SPEECH_REGION: str = os.getenv("AZURE_SPEECH_REGION", "")
    ELEVENLABS_API_KEY: str = os.getenv("ELEVENLABS_API_KEY", "")
    ELEVENLABS_MODEL_ID: str = os.getenv("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2")
    TTS_PROVIDER_ORDER: str = os.getenv("TTS_PROVIDER_ORDER", "azure,elevenlabs")
    TTS_TIMEOUT: int = int(os.getenv("TTS_TIMEOUT", "60"))
    TTS_DEFAULT_VOICE: str = os.getenv("TTS_DEFAULT_VOICE", "adam")

    # Script generation providers
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
    OLLAMA_ENABLED: bool = os.getenv("OLLAMA_ENABLED", "false").lower() == "true"
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3")
    GENERATION_PROVIDER_ORDER: str = os.getenv("GENERATION_PROVIDER_ORDER", "gemini,openai,anthropic,ollama")
    GENERATION_TIMEOUT: int = int(os.getenv("GENERATION_TIMEOUT", "90"))
    GENERATION_MAX_TOKENS: int = int(os.getenv("GENERATION_MAX_TOKENS", "4000"))

    # Content scraping providers
    SCRAPE_PROVIDER_ORDER: str = os.getenv("SCRAPE_PROVIDER_ORDER", "trafilatura,soup")
    SCRAPE_TIMEOUT: int = int(os.getenv("SCRAPE_TIMEOUT", "30"))
    SCRAPE_USER_AGENT: str = os.getenv(
        "SCRAPE_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Chunking
    GENERATION_CHUNK_LENGTH: int = int(os.getenv("GENERATION_CHUNK_LENGTH", "4000"))
    SYNTHESIS_CHUNK_LENGTH: int = int(os.getenv("SYNTHESIS_CHUNK_LENGTH", "500"))

    # Retry policies per operation class
    TTS_MAX_RETRIES: int = int(os.getenv("TTS_MAX_RETRIES", "2"))
    TTS_RETRY_BASE_DELAY: float = float(os.getenv("TTS_RETRY_BASE_DELAY", "3.0"))
    GENERATION_MAX_RETRIES: int = int(os.getenv("GENERATION_MAX_RETRIES", "3"))
    GENERATION_RETRY_BASE_DELAY: float = float(os.getenv("GENERATION_RETRY_BASE_DELAY", "1.0"))
    SCRAPE_MAX_RETRIES: int = int(os.getenv("SCRAPE_MAX_RETRIES", "2"))
    SCRAPE_RETRY_BASE_DELAY: float = float(os.getenv("SCRAPE_RETRY_BASE_DELAY", "2.0"))
    RETRY_MAX_DELAY: float = float(os.getenv("RETRY_MAX_DELAY", "10.0"))

    # Audio post-processing
    AUDIO_ENHANCEMENT_ENABLED: bool = os.getenv("AUDIO_ENHANCEMENT_ENABLED", "true").lower() == "true"
    FFMPEG_PATH: str = os.getenv("FFMPEG_PATH", "ffmpeg")
    FFMPEG_TIMEOUT: int = int(os.getenv("FFMPEG_TIMEOUT", "120"))
    AUDIO_OUTPUT_DIR: str = os.getenv("AUDIO_OUTPUT_DIR", "generated_audio")
    AUDIO_URL_PREFIX: str = os.getenv("AUDIO_URL_PREFIX", "/audio")

    # Error log
    ERROR_LOG_CAPACITY: int = int(os.getenv("ERROR_LOG_CAPACITY", "100"))

    @property
    def tts_provider_order(self) -> List[str]:
        return _split_list(self.TTS_PROVIDER_ORDER)

    @property
    def generation_provider_order(self) -> List[str]:
        return _split_list(self.GENERATION_PROVIDER_ORDER)

    @property
    def scrape_provider_order(self) -> List[str]:
        return _split_list(self.SCRAPE_PROVIDER_ORDER)

    @property
    def configured_services(self) -> Dict[str, bool]:
        """Which external providers have credentials configured."""
        return {
            "azure": bool(self.AZURE_SPEECH_KEY and self.AZURE_SPEECH_REGION),
            "elevenlabs": bool(self.ELEVENLABS_API_KEY),
            "gemini": bool(self.GEMINI_API_KEY),
            "openai": bool(self.OPENAI_API_KEY),
            "anthropic": bool(self.ANTHROPIC_API_KEY),
            "ollama": self.OLLAMA_ENABLED,
        }

    def retry_settings_for(self, operation: str) -> Dict[str, Any]:
        """
        Retry parameters for an operation class.

        Args:
            operation: One of "tts", "generation" or "scrape"

        Returns:
            Dict with max_retries, base_delay and max_delay
        """
        table = {
            "tts": (self.TTS_MAX_RETRIES, self.TTS_RETRY_BASE_DELAY),
            "generation": (self.GENERATION_MAX_RETRIES, self.GENERATION_RETRY_BASE_DELAY),
            "scrape": (self.SCRAPE_MAX_RETRIES, self.SCRAPE_RETRY_BASE_DELAY),
        }
        max_retries, base_delay = table.get(operation, (3, 1.0))
        return {
            "max_retries": max_retries,
            "base_delay": base_delay,
            "max_delay": self.RETRY_MAX_DELAY,
        }


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
