"""
API routes for the tubechat application.
"""

import asyncio
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Depends, Path

from tubechat.api.schemas import (
    ChatRequest,
    ChatResponse,
    SegmentResponse,
    TranscriptionRequest,
    TranscriptionStartResponse,
    TranscriptResponse,
    VideoDetailsResponse,
)
from tubechat.core.chat.handler import ChatAnswerer
from tubechat.core.summarizer import SocialContentGenerator, content_type_for_message
from tubechat.core.transcript_service import TranscriptService, get_default_service
from tubechat.core.youtube_downloader import YouTubeDownloader
from tubechat.models.schemas import TranscriptionStatus
from tubechat.utils.error_handling import (
    AcquisitionError,
    AnswerGenerationError,
    TubechatError,
    friendly_message,
)
from tubechat.utils.helpers import extract_video_id, is_valid_video_id
from tubechat.utils.logger import logging

router = APIRouter(prefix="/api/v1", tags=["youtube"])

CHAT_ERROR_MESSAGE = "Sorry, I encountered an error while processing your question. Please try again."


def get_service() -> TranscriptService:
    return get_default_service()


@lru_cache(maxsize=1)
def get_answerer() -> ChatAnswerer:
    return ChatAnswerer()


@lru_cache(maxsize=1)
def get_social_generator() -> SocialContentGenerator:
    return SocialContentGenerator()


@lru_cache(maxsize=1)
def get_downloader() -> YouTubeDownloader:
    return YouTubeDownloader()


def valid_video_id(video_id: str = Path(..., description="YouTube video ID")) -> str:
    if not is_valid_video_id(video_id):
        raise HTTPException(status_code=400, detail="Invalid YouTube video ID")
    return video_id


@router.post("/transcriptions", response_model=TranscriptionStartResponse)
async def start_transcription(
    request: TranscriptionRequest,
    service: TranscriptService = Depends(get_service),
):
    """
    Start transcribing a video in the background.

    - Returns "completed" if the transcript is already cached
    - Returns "in_progress" if a transcription is already running
    - Otherwise starts one and returns "started"
    """
    video_id = extract_video_id(request.video_id or request.url or "")
    if not video_id:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL or video ID")

    status = await service.start_transcription(video_id)
    return TranscriptionStartResponse(video_id=video_id, status=status)


@router.get("/transcriptions/{video_id}", response_model=TranscriptionStatus)
async def get_transcription_status(
    video_id: str = Depends(valid_video_id),
    service: TranscriptService = Depends(get_service),
):
    """Get the status and progress of a video's transcription."""
    return await service.get_transcription_status(video_id)


@router.get("/transcriptions/{video_id}/segments", response_model=TranscriptResponse)
async def get_transcript_segments(
    video_id: str = Depends(valid_video_id),
    service: TranscriptService = Depends(get_service),
):
    """Get the cached transcript of a video."""
    segments = await service.get_cached_transcript(video_id)
    if segments is None:
        raise HTTPException(status_code=404, detail="Transcript not found or not yet processed")
    return TranscriptResponse(
        video_id=video_id,
        segments=[SegmentResponse(**segment.model_dump()) for segment in segments],
    )


@router.delete("/transcriptions/{video_id}")
async def cancel_transcription(
    video_id: str = Depends(valid_video_id),
    service: TranscriptService = Depends(get_service),
):
    """Cancel a running transcription."""
    if not service.cancel_transcription(video_id):
        raise HTTPException(status_code=404, detail="No transcription in progress for this video")
    return {"video_id": video_id, "status": "cancelled"}


@router.get("/videos/{video_id}", response_model=VideoDetailsResponse)
async def get_video_details(
    video_id: str = Depends(valid_video_id),
    downloader: YouTubeDownloader = Depends(get_downloader),
):
    """Get the title, author and thumbnail of a video."""
    try:
        media_info = await asyncio.to_thread(downloader.get_media_info, video_id)
    except AcquisitionError as e:
        logging.error(f"Error checking video: {e}")
        raise HTTPException(status_code=404, detail="Video not found or not accessible")
    return VideoDetailsResponse(
        video_id=video_id,
        title=media_info.title,
        author=media_info.author,
        thumbnail=media_info.thumbnail,
    )


@router.post("/chat", response_model=ChatResponse)
async def chat_with_video(
    chat_request: ChatRequest,
    service: TranscriptService = Depends(get_service),
    answerer: ChatAnswerer = Depends(get_answerer),
    social_generator: SocialContentGenerator = Depends(get_social_generator),
):
    """Chat about a video, or generally when no video id is given."""
    try:
        if not chat_request.video_id:
            result = await answerer.answer_general(chat_request.message)
            return ChatResponse(text=result.text, timestamps=result.timestamps)

        video_id = extract_video_id(chat_request.video_id)
        if not video_id:
            raise HTTPException(status_code=400, detail="Invalid YouTube video ID")

        try:
            transcript = await service.get_transcript(video_id)
        except TubechatError as e:
            logging.error(f"Error processing transcript for {video_id}: {e}")
            return ChatResponse(text=friendly_message(e))

        if chat_request.mode == "social":
            content_type = content_type_for_message(chat_request.message)
            text = await social_generator.generate(content_type, transcript)
            return ChatResponse(text=text)

        result = await answerer.answer(chat_request.message, transcript)
        return ChatResponse(text=result.text, timestamps=result.timestamps)
    except AnswerGenerationError as e:
        logging.error(f"Error generating response: {e}")
        raise HTTPException(status_code=502, detail=CHAT_ERROR_MESSAGE)
