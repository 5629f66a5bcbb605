"""
Centralized error types and error helpers for the application.
"""

import json
from typing import Optional, Dict, Any

from tubechat.config import config
from tubechat.utils.logger import logging


class TubechatError(Exception):
    """Base class for every error raised by the transcription core."""


class AcquisitionError(TubechatError):
    """The source video is unavailable, restricted or the id is invalid."""

    def __init__(self, video_id: str, reason: str):
        self.video_id = video_id
        self.reason = reason
        super().__init__(f"Could not acquire audio for video {video_id}: {reason}")


class MediaProcessingError(TubechatError):
    """An external media tool (ffmpeg, ffprobe) exited with an error."""

    def __init__(self, tool: str, returncode: Optional[int], stderr: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{tool} exited with code {returncode}: {stderr.strip()[-500:]}")


class StageTimeoutError(TubechatError):
    """A pipeline stage did not finish within the configured timeout."""

    def __init__(self, stage: str, timeout: float):
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"Stage '{stage}' timed out after {timeout:.0f}s")


class ChunkSizeExceededError(TubechatError):
    """An audio chunk is still above the payload ceiling after maximal compression."""

    def __init__(self, index: int, size_bytes: int, limit_bytes: int):
        self.index = index
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Chunk {index} is {size_bytes} bytes, above the {limit_bytes} byte limit"
        )


class TranscriptionServiceError(TubechatError):
    """The speech-to-text service was unreachable or returned a bad response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class TranscriptionCancelledError(TubechatError):
    """The shared run of a video was cancelled while callers were waiting on it."""

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__(f"Transcription of {video_id} was cancelled")


class CacheWriteError(TubechatError):
    """Persisting a transcript failed. Not fatal for the caller."""

    def __init__(self, video_id: str, reason: str):
        self.video_id = video_id
        super().__init__(f"Could not cache transcript for {video_id}: {reason}")


class AnswerGenerationError(TubechatError):
    """The chat model failed or returned an unusable reply."""


FRIENDLY_MESSAGES = {
    AcquisitionError: (
        "I had trouble processing this video. This could be due to download "
        "restrictions. Please check if the video is publicly available."
    ),
    ChunkSizeExceededError: (
        "I couldn't transcribe this video. This might be due to the video length "
        "or format. Please try a different video."
    ),
    TranscriptionServiceError: (
        "The transcription service is unavailable right now. Please try again shortly."
    ),
    TranscriptionCancelledError: (
        "The transcription of this video was cancelled. Ask again to restart it."
    ),
}

DEFAULT_FRIENDLY_MESSAGE = (
    "I had trouble processing this video. Please try a shorter video or try again."
)


def friendly_message(error: Exception) -> str:
    """
    Map a pipeline error to a message that can be shown to end users.

    Args:
        error: The exception raised by the pipeline

    Returns:
        A retryable, user-facing message
    """
    for error_type, message in FRIENDLY_MESSAGES.items():
        if isinstance(error, error_type):
            return message
    return DEFAULT_FRIENDLY_MESSAGE


def log_diagnostic_info(context: Dict[str, Any]):
    """
    Log diagnostic information for debugging.

    Args:
        context: Dictionary of diagnostic information
    """
    if not config.DEBUG:
        return

    logging.debug(f"Diagnostic info: {json.dumps(context, default=str)}")
