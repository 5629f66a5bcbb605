"""
Core functionality for the tubechat application.

This package contains the transcription pipeline (download, chunking,
speech-to-text, assembly), the transcript cache and single-flight
coordinator, and context selection for answering questions.

The functions below delegate to the process-wide default service.
"""

from typing import List, Optional, Sequence

from tubechat.core.context_selector import ContextSelector
from tubechat.core.transcript_service import get_default_service
from tubechat.models.schemas import TranscriptSegment

_selector: Optional[ContextSelector] = None


async def get_transcript(video_id: str) -> List[TranscriptSegment]:
    return await get_default_service().get_transcript(video_id)


async def is_transcript_cached(video_id: str) -> bool:
    return await get_default_service().is_transcript_cached(video_id)


def is_transcription_in_progress(video_id: str) -> bool:
    return get_default_service().is_transcription_in_progress(video_id)


def get_transcription_progress(video_id: str) -> Optional[float]:
    return get_default_service().get_transcription_progress(video_id)


def get_relevant_context(query: str, transcript: Sequence[TranscriptSegment]) -> List[TranscriptSegment]:
    global _selector
    if _selector is None:
        _selector = ContextSelector()
    return _selector.get_relevant_context(query, transcript)
