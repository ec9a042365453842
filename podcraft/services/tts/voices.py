"""
Static voice mapping between abstract voice ids and provider voices.
"""
from typing import Dict, Optional

AZURE_DEFAULT_VOICE = "en-US-DavisNeural"
ELEVENLABS_DEFAULT_VOICE = "pNInz6obpgDQGcFmaJgB"

VOICE_MAP: Dict[str, Dict[str, str]] = {
    "adam": {"azure": "en-US-DavisNeural", "elevenlabs": "pNInz6obpgDQGcFmaJgB"},
    "bella": {"azure": "en-US-JennyNeural", "elevenlabs": "EXAVITQu4vr4xnSDxMaL"},
    "charlie": {"azure": "en-AU-WilliamNeural", "elevenlabs": "IKne3meq5aSn9XLyUdCD"},
    "domi": {"azure": "en-US-AriaNeural", "elevenlabs": "AZnzlk1XvdvUeBnXmlld"},
    "elli": {"azure": "en-US-SaraNeural", "elevenlabs": "MF3mGyEYCl7XYWbV9V6O"},
    "fin": {"azure": "en-IE-ConnorNeural", "elevenlabs": "D38z5RcWu1voky8WS1ja"},
    "freya": {"azure": "en-US-MichelleNeural", "elevenlabs": "jsCqWAovK2LkecY7zXl4"},
    "giovanni": {"azure": "en-US-GuyNeural", "elevenlabs": "zcAOhNBS3c14rBihAFp1"},
    "josh": {"azure": "en-US-TonyNeural", "elevenlabs": "TxGEqnHWrfWFTfGW9XjX"},
    "liam": {"azure": "en-US-BrandonNeural", "elevenlabs": "TX3LPaxmHKxFdv7VOQHJ"},
    "nicole": {"azure": "en-US-NancyNeural", "elevenlabs": "piTKgcLEGmPE4e6mEKli"},
    "rachel": {"azure": "en-US-AvaNeural", "elevenlabs": "21m00Tcm4TlvDq8ikWAM"},
    "sam": {"azure": "en-US-JasonNeural", "elevenlabs": "yoZ06aMxZJJ28mfd3POQ"},
}

PROVIDER_DEFAULT_VOICES: Dict[str, str] = {
    "azure": AZURE_DEFAULT_VOICE,
    "elevenlabs": ELEVENLABS_DEFAULT_VOICE,
}


def resolve_voice(voice_id: Optional[str], provider: str) -> str:
    """
    Provider voice for an abstract voice id.

    Provider-native ids already present in the table pass through unchanged;
    anything else resolves to the provider's default voice.
    """
    default = PROVIDER_DEFAULT_VOICES[provider]
    if not voice_id:
        return default
    entry = VOICE_MAP.get(voice_id.lower())
    if entry and provider in entry:
        return entry[provider]
    if any(voices.get(provider) == voice_id for voices in VOICE_MAP.values()):
        return voice_id
    return default


def available_voices() -> Dict[str, Dict[str, str]]:
    return {name: dict(voices) for name, voices in VOICE_MAP.items()}
