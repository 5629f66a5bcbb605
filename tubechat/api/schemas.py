from typing import Optional, List

from pydantic import BaseModel, model_validator

from tubechat.models.schemas import Timestamp


class TranscriptionRequest(BaseModel):
    """Model for starting a transcription by video id or URL."""
    video_id: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode="after")
    def require_target(self):
        if not self.video_id and not self.url:
            raise ValueError("Either video_id or url is required")
        return self


class TranscriptionStartResponse(BaseModel):
    """Model for start transcription responses."""
    video_id: str
    status: str


class SegmentResponse(BaseModel):
    text: str
    start: float
    end: float


class TranscriptResponse(BaseModel):
    """Model for transcript responses."""
    video_id: str
    segments: List[SegmentResponse]


class VideoDetailsResponse(BaseModel):
    """Model for video details responses."""
    video_id: str
    title: str
    author: str
    thumbnail: Optional[str] = None


class ChatRequest(BaseModel):
    """Model for chat requests. Without a video id the chat is general."""
    message: str
    video_id: Optional[str] = None
    mode: Optional[str] = None


class ChatResponse(BaseModel):
    """Model for chat responses."""
    text: str
    timestamps: List[Timestamp] = []
