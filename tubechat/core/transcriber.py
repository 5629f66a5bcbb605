"""
Module for transcribing audio chunks using Groq's API.
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import groq
from groq import AsyncGroq

from tubechat.config import config
from tubechat.models.schemas import TranscriptionConfig, TranscriptSegment
from tubechat.utils.error_handling import TranscriptionServiceError
from tubechat.utils.logger import logging


def _as_seconds(value: Any) -> float:
    """Service timestamps may be missing or null; those count as zero."""
    try:
        return max(float(value or 0), 0.0)
    except (TypeError, ValueError):
        return 0.0


def parse_segments(payload: Any) -> List[TranscriptSegment]:
    """
    Parse a verbose_json transcription payload into segments.

    Args:
        payload: Decoded response body (dict with a "segments" list)

    Returns:
        Segments relative to the start of the transcribed file
    """
    if not isinstance(payload, dict):
        raise TranscriptionServiceError(f"Malformed transcription response: {type(payload).__name__}")

    raw_segments = payload.get("segments") or []
    if not isinstance(raw_segments, list):
        raise TranscriptionServiceError("Malformed transcription response: segments is not a list")

    segments = []
    for raw in raw_segments:
        if not isinstance(raw, dict):
            raise TranscriptionServiceError("Malformed transcription response: segment is not an object")
        start = _as_seconds(raw.get("start"))
        end = max(_as_seconds(raw.get("end")), start)
        segments.append(TranscriptSegment(text=str(raw.get("text") or "").strip(), start=start, end=end))
    return segments


class TranscriptionClient:
    """Class to send audio chunks to the speech-to-text service."""

    def __init__(
        self,
        transcribe_config: Optional[TranscriptionConfig] = None,
        api_key: Optional[str] = None,
        timeout: float = config.STAGE_TIMEOUT,
        client: Optional[AsyncGroq] = None,
    ):
        """
        Initialize the transcriber with API key.

        Args:
            transcribe_config: Model and response options
            api_key: Groq API key (if None, will try to get from environment)
            timeout: Seconds to wait for one chunk before giving up
            client: Preconfigured async client, mainly for tests
        """
        self.transcribe_config = transcribe_config or TranscriptionConfig(model=config.TRANSCRIPTION_MODEL)
        if client is None:
            api_key = api_key or os.getenv("GROQ_API_KEY")
            if not api_key:
                raise ValueError(
                    "Groq API key is required. Set it in .env file or pass directly."
                )
            # Failures abort the pipeline, so the SDK must not retry on its own.
            client = AsyncGroq(api_key=api_key, timeout=timeout, max_retries=0)
        self.client = client

    async def transcribe(self, audio_path: Path) -> List[TranscriptSegment]:
        """
        Transcribe one audio file.

        Args:
            audio_path: Path to an audio chunk below the service payload limit

        Returns:
            Ordered segments relative to the chunk's own zero point
        """
        audio_path = Path(audio_path)
        if not audio_path.is_file():
            raise FileNotFoundError(f"Audio file not found at {audio_path}")

        logging.info(f"Transcribing audio file: {audio_path}")
        audio_bytes = await asyncio.to_thread(audio_path.read_bytes)

        options = {
            "model": self.transcribe_config.model,
            "response_format": self.transcribe_config.response_format,
            "timestamp_granularities": self.transcribe_config.timestamp_granularities,
            "temperature": self.transcribe_config.temperature,
        }
        if self.transcribe_config.prompt:
            options["prompt"] = self.transcribe_config.prompt
        if self.transcribe_config.language:
            options["language"] = self.transcribe_config.language

        try:
            transcription = await self.client.audio.transcriptions.create(
                file=(audio_path.name, audio_bytes),
                **options,
            )
        except groq.APIStatusError as e:
            raise TranscriptionServiceError(
                f"Transcription API error: {e.status_code} {e.message}", status_code=e.status_code
            ) from e
        except groq.APIError as e:
            raise TranscriptionServiceError(f"Transcription service unreachable: {e}") from e

        segments = parse_segments(self._to_payload(transcription))
        logging.info(f"Received {len(segments)} segments for {audio_path.name}")
        return segments

    @staticmethod
    def _to_payload(transcription: Any) -> Dict[str, Any]:
        if hasattr(transcription, "model_dump"):
            return transcription.model_dump()
        return transcription
