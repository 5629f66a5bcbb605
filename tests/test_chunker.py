"""
Tests for the audio chunker module.
"""

import pytest

from fakes import FakeMediaTool
from tubechat.core.chunker import ENCODING_LADDER, AudioChunker
from tubechat.utils.error_handling import ChunkSizeExceededError, MediaProcessingError


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "audio.mp3"
    path.write_bytes(b"\0" * 2048)
    return path


def test_chunk_count():
    """Test chunk count is the duration divided by the chunk length, rounded up."""
    chunker = AudioChunker(FakeMediaTool(), max_chunk_duration=600, max_chunk_size=40_000)

    assert chunker.chunk_count(1500) == 3
    assert chunker.chunk_count(1200) == 2
    assert chunker.chunk_count(1) == 1


def test_select_profile():
    """Test the best quality profile that fits the ceiling is chosen."""
    roomy = AudioChunker(FakeMediaTool(), max_chunk_duration=600, max_chunk_size=24 * 1024 * 1024)
    assert roomy.select_profile(600) == ENCODING_LADDER[0]

    tight = AudioChunker(FakeMediaTool(), max_chunk_duration=10, max_chunk_size=40_000)
    profile = tight.select_profile(10)
    assert profile.bitrate_kbps == 24
    assert profile.channels == 1

    hopeless = AudioChunker(FakeMediaTool(), max_chunk_duration=600, max_chunk_size=1000)
    assert hopeless.select_profile(600) == ENCODING_LADDER[-1]


@pytest.mark.asyncio
async def test_small_audio_is_single_chunk(tmp_path, audio_file):
    """Test audio within both limits is passed through without re-encoding."""
    media_tool = FakeMediaTool()
    chunker = AudioChunker(media_tool, max_chunk_duration=600, max_chunk_size=40_000)

    chunks = await chunker.chunk(audio_file, 300.0, tmp_path)

    assert len(chunks) == 1
    assert chunks[0].path == audio_file
    assert chunks[0].start == 0.0
    assert chunks[0].duration == 300.0
    assert media_tool.split_calls == []


@pytest.mark.asyncio
async def test_long_audio_split_into_contiguous_chunks(tmp_path, audio_file):
    """Test a 25 minute file becomes three chunks at 0, 10 and 20 minutes."""
    media_tool = FakeMediaTool()
    chunker = AudioChunker(media_tool, max_chunk_duration=600, max_chunk_size=40_000)

    chunks = await chunker.chunk(audio_file, 1500.0, tmp_path)

    assert [chunk.index for chunk in chunks] == [0, 1, 2]
    assert [chunk.start for chunk in chunks] == [0.0, 600.0, 1200.0]
    assert [chunk.duration for chunk in chunks] == [600.0, 600.0, 300.0]
    assert [chunk.path.name for chunk in chunks] == ["chunk_000.mp3", "chunk_001.mp3", "chunk_002.mp3"]
    assert len(media_tool.split_calls) == 3


@pytest.mark.asyncio
async def test_oversized_short_audio_is_reencoded(tmp_path):
    """Test a short file above the size ceiling is still re-encoded."""
    audio = tmp_path / "audio.mp3"
    audio.write_bytes(b"\0" * 50_000)
    media_tool = FakeMediaTool()
    chunker = AudioChunker(media_tool, max_chunk_duration=10, max_chunk_size=40_000)

    chunks = await chunker.chunk(audio, 5.0, tmp_path)

    assert len(chunks) == 1
    assert chunks[0].path.name == "chunk_000.mp3"
    assert len(media_tool.split_calls) == 1


@pytest.mark.asyncio
async def test_oversized_chunk_recompressed_once(tmp_path, audio_file):
    """Test a chunk above the ceiling is re-encoded at the strongest profile."""
    media_tool = FakeMediaTool(chunk_size=lambda profile, attempt: 40_001 if attempt == 0 else 1000)
    chunker = AudioChunker(media_tool, max_chunk_duration=10, max_chunk_size=40_000)

    chunks = await chunker.chunk(audio_file, 25.0, tmp_path)

    assert len(chunks) == 3
    assert len(media_tool.split_calls) == 6
    retries = media_tool.split_calls[1::2]
    assert all(call["profile"] == ENCODING_LADDER[-1] for call in retries)
    assert all(chunk.path.stat().st_size <= 40_000 for chunk in chunks)


@pytest.mark.asyncio
async def test_chunk_still_too_large_fails(tmp_path, audio_file):
    """Test a chunk above the ceiling after re-compression is fatal."""
    media_tool = FakeMediaTool(chunk_size=lambda profile, attempt: 40_001)
    chunker = AudioChunker(media_tool, max_chunk_duration=10, max_chunk_size=40_000)

    with pytest.raises(ChunkSizeExceededError) as exc_info:
        await chunker.chunk(audio_file, 25.0, tmp_path)

    assert exc_info.value.index == 0
    assert exc_info.value.limit_bytes == 40_000
    assert len(media_tool.split_calls) == 2


@pytest.mark.asyncio
async def test_non_positive_duration_fails(tmp_path, audio_file):
    """Test a zero duration cannot be chunked."""
    chunker = AudioChunker(FakeMediaTool(), max_chunk_duration=600, max_chunk_size=40_000)

    with pytest.raises(MediaProcessingError):
        await chunker.chunk(audio_file, 0.0, tmp_path)
