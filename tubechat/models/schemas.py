"""
Data models for the tubechat application.
"""
from enum import Enum
from pathlib import Path
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TranscriptSegment(BaseModel):
    """A transcribed span of speech with its start/end time in seconds."""
    model_config = ConfigDict(frozen=True)

    text: str
    start: float = Field(default=0.0, ge=0)
    end: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError("Segment end must not precede its start")
        return self

    def shifted(self, offset: float) -> "TranscriptSegment":
        """Return a copy moved forward by `offset` seconds."""
        return self.model_copy(update={"start": self.start + offset, "end": self.end + offset})


class JobStatus(str, Enum):
    """Lifecycle of a transcription request for one video."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TranscriptionStatus(BaseModel):
    """Point-in-time view of a video's transcription."""
    video_id: str
    status: JobStatus
    progress: float = 0.0


class EncodingProfile(BaseModel):
    """Audio encoding settings used when re-encoding chunks."""
    model_config = ConfigDict(frozen=True)

    bitrate_kbps: int
    channels: int = 1
    sample_rate: int = 16000

    def estimated_size(self, duration: float) -> int:
        """Approximate encoded size in bytes for `duration` seconds of audio."""
        return int(self.bitrate_kbps * 1000 / 8 * duration)


class AudioChunk(BaseModel):
    """One contiguous slice of the source audio."""
    index: int
    path: Path
    start: float
    duration: float


class ChunkTranscript(BaseModel):
    """Segments of one chunk, timed relative to the chunk's own zero point."""
    index: int
    segments: List[TranscriptSegment] = Field(default_factory=list)


class MediaInfo(BaseModel):
    """Metadata about a YouTube video."""
    video_id: str
    title: str
    author: str
    thumbnail: Optional[str] = None
    length_seconds: Optional[int] = None

    model_config = {"from_attributes": True}


class TranscriptionConfig(BaseModel):
    """Configuration for transcription operations."""
    model: str = "whisper-large-v3-turbo"
    language: Optional[str] = None
    prompt: Optional[str] = None
    response_format: str = "verbose_json"
    temperature: float = 0.0
    timestamp_granularities: List[str] = ["segment"]


class Timestamp(BaseModel):
    """A moment of the video cited by an answer."""
    seconds: float
    label: Optional[str] = None


class AnswerResult(BaseModel):
    """Answer text plus the timestamps it refers to."""
    text: str
    timestamps: List[Timestamp] = Field(default_factory=list)


class SocialContentType(str, Enum):
    """Kinds of social media content that can be generated from a video."""
    TWITTER = "twitter"
    THREAD = "thread"
    SUMMARY = "summary"
