"""
Module for splitting audio into chunks the transcription service accepts.
"""

import math
from pathlib import Path
from typing import List, Optional

from tubechat.config import config
from tubechat.core.media_tool import MediaTool
from tubechat.models.schemas import AudioChunk, EncodingProfile
from tubechat.utils.error_handling import ChunkSizeExceededError, MediaProcessingError
from tubechat.utils.logger import logging

# Ordered from best quality to maximal compression.
ENCODING_LADDER = [
    EncodingProfile(bitrate_kbps=128, channels=2, sample_rate=44100),
    EncodingProfile(bitrate_kbps=96, channels=2, sample_rate=44100),
    EncodingProfile(bitrate_kbps=64, channels=1, sample_rate=22050),
    EncodingProfile(bitrate_kbps=48, channels=1, sample_rate=22050),
    EncodingProfile(bitrate_kbps=32, channels=1, sample_rate=16000),
    EncodingProfile(bitrate_kbps=24, channels=1, sample_rate=16000),
    EncodingProfile(bitrate_kbps=16, channels=1, sample_rate=16000),
]

# Container overhead on top of the raw bitrate estimate.
SIZE_HEADROOM = 1.1


class AudioChunker:
    """Class to split audio into bounded duration and size chunks."""

    def __init__(
        self,
        media_tool: MediaTool,
        max_chunk_duration: int = config.MAX_CHUNK_DURATION,
        max_chunk_size: Optional[int] = None,
    ):
        self.media_tool = media_tool
        self.max_chunk_duration = max_chunk_duration
        self.max_chunk_size = max_chunk_size or config.max_chunk_size_bytes()

    def needs_chunking(self, duration: float, size_bytes: int) -> bool:
        return duration > self.max_chunk_duration or size_bytes > self.max_chunk_size

    def chunk_count(self, duration: float) -> int:
        return max(1, math.ceil(duration / self.max_chunk_duration))

    def select_profile(self, chunk_duration: float) -> EncodingProfile:
        """Pick the best quality profile whose estimated chunk size fits the ceiling."""
        for profile in ENCODING_LADDER:
            if profile.estimated_size(chunk_duration) * SIZE_HEADROOM <= self.max_chunk_size:
                return profile
        return ENCODING_LADDER[-1]

    async def chunk(self, audio_path: Path, duration: float, output_dir: Path) -> List[AudioChunk]:
        """
        Split an audio file into chunks.

        Args:
            audio_path: Path to the full audio file
            duration: Measured duration of the audio in seconds
            output_dir: Directory the chunk files are written to

        Returns:
            Contiguous, ordered chunks covering the whole audio
        """
        if duration <= 0:
            raise MediaProcessingError("ffprobe", 0, f"non-positive duration {duration}")

        size_bytes = audio_path.stat().st_size
        if not self.needs_chunking(duration, size_bytes):
            logging.info(f"Audio fits in a single chunk ({duration:.0f}s, {size_bytes} bytes)")
            return [AudioChunk(index=0, path=audio_path, start=0.0, duration=duration)]

        num_chunks = self.chunk_count(duration)
        profile = self.select_profile(min(duration, self.max_chunk_duration))
        logging.info(
            f"Splitting {duration:.0f}s of audio into {num_chunks} chunks "
            f"at {profile.bitrate_kbps}kbps, {profile.channels} channel(s)"
        )

        chunks = []
        for index in range(num_chunks):
            start = float(index * self.max_chunk_duration)
            chunk_duration = min(self.max_chunk_duration, duration - start)
            chunk_path = output_dir / f"chunk_{index:03d}.mp3"
            await self._encode_chunk(audio_path, chunk_path, index, start, chunk_duration, profile)
            chunks.append(AudioChunk(index=index, path=chunk_path, start=start, duration=chunk_duration))
        return chunks

    async def _encode_chunk(
        self,
        audio_path: Path,
        chunk_path: Path,
        index: int,
        start: float,
        duration: float,
        profile: EncodingProfile,
    ) -> None:
        await self.media_tool.split_chunk(audio_path, chunk_path, start, duration, profile)
        size_bytes = chunk_path.stat().st_size
        if size_bytes <= self.max_chunk_size:
            return

        # At most one re-compression attempt per chunk.
        strongest = ENCODING_LADDER[-1]
        if profile == strongest:
            raise ChunkSizeExceededError(index, size_bytes, self.max_chunk_size)

        logging.warning(
            f"Chunk {index} is {size_bytes} bytes, re-encoding at {strongest.bitrate_kbps}kbps"
        )
        await self.media_tool.split_chunk(audio_path, chunk_path, start, duration, strongest)
        size_bytes = chunk_path.stat().st_size
        if size_bytes > self.max_chunk_size:
            raise ChunkSizeExceededError(index, size_bytes, self.max_chunk_size)
