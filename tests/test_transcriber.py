"""
Tests for the audio transcriber module.
"""

import os
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

import groq
import httpx

from tubechat.models.schemas import TranscriptionConfig, TranscriptSegment
from tubechat.core.transcriber import TranscriptionClient, parse_segments
from tubechat.utils.error_handling import TranscriptionServiceError

TRANSCRIPTION_URL = "https://api.groq.com/openai/v1/audio/transcriptions"


@pytest.fixture
def mock_groq_client():
    """Fixture to mock the async Groq client."""
    with patch('tubechat.core.transcriber.AsyncGroq') as mock_groq:
        mock_client = mock_groq.return_value

        # Set up mock transcription response
        mock_response = MagicMock()
        mock_response.model_dump.return_value = {
            "text": "This is a test transcript",
            "segments": [
                {"id": 0, "start": 0.0, "end": 2.5, "text": " This is a test"},
                {"id": 1, "start": 2.5, "end": 4.0, "text": " transcript"},
            ],
            "language": "en",
        }
        mock_client.audio.transcriptions.create = AsyncMock(return_value=mock_response)

        yield mock_groq


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "chunk_000.mp3"
    path.write_bytes(b"test audio data")
    return path


@pytest.fixture
def transcription_config():
    """Fixture to create a TranscriptionConfig object."""
    return TranscriptionConfig(
        model="whisper-large-v3-turbo",
        language="en",
        prompt="Transcribe this YouTube video",
    )


def status_error(status_code):
    request = httpx.Request("POST", TRANSCRIPTION_URL)
    response = httpx.Response(status_code, request=request)
    return groq.APIStatusError("Internal server error", response=response, body=None)


@patch.dict(os.environ, {"GROQ_API_KEY": "test_api_key"})
def test_init_transcriber(mock_groq_client):
    """Test the client is built without SDK retries."""
    TranscriptionClient()

    kwargs = mock_groq_client.call_args.kwargs
    assert kwargs["api_key"] == "test_api_key"
    assert kwargs["max_retries"] == 0


def test_init_without_api_key(monkeypatch):
    """Test a missing API key is rejected."""
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    with pytest.raises(ValueError):
        TranscriptionClient()


@pytest.mark.asyncio
async def test_transcribe(mock_groq_client, audio_file, transcription_config):
    """Test transcribing an audio chunk."""
    transcriber = TranscriptionClient(transcription_config, api_key="test_api_key")
    segments = await transcriber.transcribe(audio_file)

    create = mock_groq_client.return_value.audio.transcriptions.create
    create.assert_awaited_once()
    kwargs = create.await_args.kwargs
    assert kwargs["file"] == ("chunk_000.mp3", b"test audio data")
    assert kwargs["response_format"] == "verbose_json"
    assert kwargs["timestamp_granularities"] == ["segment"]
    assert kwargs["language"] == "en"
    assert kwargs["prompt"] == "Transcribe this YouTube video"

    assert segments == [
        TranscriptSegment(text="This is a test", start=0.0, end=2.5),
        TranscriptSegment(text="transcript", start=2.5, end=4.0),
    ]


@pytest.mark.asyncio
async def test_transcribe_omits_unset_options(mock_groq_client, audio_file):
    """Test language and prompt are only sent when configured."""
    transcriber = TranscriptionClient(TranscriptionConfig(), api_key="test_api_key")
    await transcriber.transcribe(audio_file)

    kwargs = mock_groq_client.return_value.audio.transcriptions.create.await_args.kwargs
    assert "language" not in kwargs
    assert "prompt" not in kwargs


@pytest.mark.asyncio
async def test_transcribe_reads_file_in_thread(mock_groq_client, audio_file):
    """Test the chunk file is read in a worker thread."""
    transcriber = TranscriptionClient(TranscriptionConfig(), api_key="test_api_key")
    with patch("tubechat.core.transcriber.asyncio.to_thread", AsyncMock(return_value=b"threaded")) as to_thread:
        await transcriber.transcribe(audio_file)

    to_thread.assert_awaited_once_with(audio_file.read_bytes)
    kwargs = mock_groq_client.return_value.audio.transcriptions.create.await_args.kwargs
    assert kwargs["file"] == ("chunk_000.mp3", b"threaded")


@pytest.mark.asyncio
async def test_transcribe_server_error(audio_file):
    """Test an HTTP 500 from the service becomes a TranscriptionServiceError."""
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(side_effect=status_error(500))
    transcriber = TranscriptionClient(client=client)

    with pytest.raises(TranscriptionServiceError) as exc_info:
        await transcriber.transcribe(audio_file)

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_transcribe_connection_error(audio_file):
    """Test an unreachable service becomes a TranscriptionServiceError."""
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(
        side_effect=groq.APIConnectionError(request=httpx.Request("POST", TRANSCRIPTION_URL))
    )
    transcriber = TranscriptionClient(client=client)

    with pytest.raises(TranscriptionServiceError) as exc_info:
        await transcriber.transcribe(audio_file)

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_transcribe_file_not_found(tmp_path):
    """Test transcribing with non-existent audio file."""
    transcriber = TranscriptionClient(client=MagicMock())

    with pytest.raises(FileNotFoundError):
        await transcriber.transcribe(tmp_path / "nonexistent_file.mp3")


def test_parse_segments_defaults_missing_times():
    """Test missing or null timestamps are treated as zero."""
    segments = parse_segments({"segments": [
        {"text": "no times"},
        {"text": "null times", "start": None, "end": None},
        {"text": "end only", "end": 3.0},
    ]})

    assert [(s.start, s.end) for s in segments] == [(0.0, 0.0), (0.0, 0.0), (0.0, 3.0)]


def test_parse_segments_clamps_reversed_times():
    """Test an end before the start is raised to the start."""
    segments = parse_segments({"segments": [{"text": "odd", "start": 5.0, "end": 4.0}]})

    assert segments[0].start == 5.0
    assert segments[0].end == 5.0


def test_parse_segments_without_speech():
    """Test a payload with no segments yields an empty transcript."""
    assert parse_segments({"text": ""}) == []


@pytest.mark.parametrize("payload", [
    "not json",
    {"segments": "nope"},
    {"segments": ["nope"]},
])
def test_parse_segments_malformed(payload):
    """Test malformed payloads are reported as service errors."""
    with pytest.raises(TranscriptionServiceError):
        parse_segments(payload)
