"""
Audio persistence.

The synthesis pipeline only produces bytes; routes hand them to an AudioStore
and return the locator it gives back.
"""

import uuid
from pathlib import Path
from typing import Protocol, Union

from podcraft.exceptions import AudioProcessingError
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class AudioStore(Protocol):
    def save(self, audio: bytes, suffix: str = "mp3") -> str:
        """Persist audio and return a locator for it."""
        ...


class LocalAudioStore:
    """Writes podcasts to a local directory served under a URL prefix."""

    def __init__(self, output_dir: Union[str, Path] = "generated_audio", url_prefix: str = "/audio"):
        self.output_dir = Path(output_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, audio: bytes, suffix: str = "mp3") -> str:
        if not audio:
            raise AudioProcessingError("Refusing to store empty audio")

        filename = f"podcast-{uuid.uuid4()}.{suffix.lstrip('.')}"
        file_path = self.output_dir / filename
        # OSError propagates unwrapped; the classifier reads its errno.
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(audio)

        logger.info(f"💾 Saved {len(audio)} bytes to {file_path}")
        return f"{self.url_prefix}/{filename}"
