"""
Whole-buffer audio enhancement through ffmpeg.

The reassembled podcast is piped through one declarative filter graph. The
step is optional: if ffmpeg is missing or fails, the original buffer is kept.
"""

import asyncio
from typing import Sequence, Tuple
from podcraft.exceptions import AudioProcessingError
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FILTERS: Sequence[str] = (
    "volume=1.1",
    "highpass=f=80",
    "lowpass=f=8000",
    "dynaudnorm=p=0.9:s=5",
    "acompressor=threshold=0.089:ratio=9:attack=200:release=1000",
    "equalizer=f=2000:width_type=h:width=200:g=2",
    "aresample=44100",
)
DEFAULT_FILTER_GRAPH = ",".join(DEFAULT_FILTERS)


class AudioEnhancer:
    """Runs ffmpeg over stdin/stdout with a single audio filter graph."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: float = 120, filter_graph: str = DEFAULT_FILTER_GRAPH):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.filter_graph = filter_graph

    async def apply_filters(self, audio: bytes, filter_graph: str) -> bytes:
        """
        Apply ``filter_graph`` to an mp3 buffer.

        Raises:
            AudioProcessingError: If ffmpeg is missing, times out or exits non-zero
        """
        command = [
            self.ffmpeg_path, "-hide_banner", "-loglevel", "error",
            "-f", "mp3", "-i", "pipe:0",
            "-af", filter_graph,
            "-codec:a", "libmp3lame", "-b:a", "128k",
            "-f", "mp3", "pipe:1",
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise AudioProcessingError(f"ffmpeg could not be started: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(input=audio), self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise AudioProcessingError(f"ffmpeg timed out after {self.timeout}s")

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()[:300]
            raise AudioProcessingError(f"ffmpeg exited with code {process.returncode}: {detail}")
        if not stdout:
            raise AudioProcessingError("ffmpeg produced no output")
        return stdout

    async def enhance(self, audio: bytes) -> Tuple[bytes, bool]:
        """
        Enhance a buffer, never failing.

        Returns:
            (buffer, enhanced): the filtered buffer and True, or the original
            buffer and False when filtering failed
        """
        try:
            enhanced = await self.apply_filters(audio, self.filter_graph)
        except AudioProcessingError as e:
            logger.warning(f"Audio enhancement failed, using unenhanced audio: {e}")
            return audio, False
        logger.info(f"Audio enhanced ({len(audio)} -> {len(enhanced)} bytes)")
        return enhanced, True
