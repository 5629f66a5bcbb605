"""
Module for stitching chunk transcripts together and reporting progress.
"""

from typing import Callable, List, Optional, Sequence

from tubechat.config import config
from tubechat.models.schemas import ChunkTranscript, TranscriptSegment

ProgressCallback = Callable[[float], None]

# Progress milestones, in percent.
ACQUIRED = 15.0
EXTRACTED = 30.0
TRANSCRIBED = 90.0
COMPLETE = 100.0


class ProgressTracker:
    """
    Publishes pipeline progress through a callback.

    0-15 covers acquisition, 15-30 extraction and duration probing, 30-90
    chunk transcription spread evenly across chunks, and 90-100
    finalization. Published values never decrease.
    """

    def __init__(self, publish: Optional[ProgressCallback] = None):
        self._publish = publish
        self.progress = 0.0
        self._per_chunk = 0.0

    def _set(self, value: float) -> None:
        value = min(max(value, self.progress), COMPLETE)
        self.progress = value
        if self._publish is not None:
            self._publish(value)

    def acquired(self) -> None:
        self._set(ACQUIRED)

    def extracted(self) -> None:
        self._set(EXTRACTED)

    def start_chunks(self, num_chunks: int) -> None:
        self._per_chunk = (TRANSCRIBED - EXTRACTED) / max(num_chunks, 1)

    def chunk_done(self) -> None:
        self._set(min(self.progress + self._per_chunk, TRANSCRIBED))

    def finalizing(self) -> None:
        self._set(TRANSCRIBED)

    def complete(self) -> None:
        self._set(COMPLETE)


class TranscriptAssembler:
    """Class to merge per-chunk results into one time-aligned transcript."""

    def __init__(self, max_chunk_duration: int = config.MAX_CHUNK_DURATION):
        self.max_chunk_duration = max_chunk_duration

    def offset_for(self, index: int) -> float:
        return float(index * self.max_chunk_duration)

    def assemble(self, chunk_results: Sequence[ChunkTranscript]) -> List[TranscriptSegment]:
        """
        Shift every chunk's segments by its offset and concatenate them.

        Args:
            chunk_results: Per-chunk segments, in any completion order

        Returns:
            One transcript sorted by start time
        """
        transcript = []
        for result in sorted(chunk_results, key=lambda r: r.index):
            offset = self.offset_for(result.index)
            transcript.extend(segment.shifted(offset) for segment in result.segments)
        # Stable, so segments sharing a start keep their chunk order.
        transcript.sort(key=lambda segment: segment.start)
        return transcript
