"""
Configuration for pytest tests.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

# Point the application at throwaway directories before tubechat is imported.
TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="tubechat-test-"))
os.environ["DATA_DIR"] = str(TEST_DATA_DIR)
os.environ["GROQ_API_KEY"] = os.environ.get("GROQ_API_KEY", "test_api_key")
os.environ["TRANSCRIPT_STORE"] = "file"
os.environ["ENVIRONMENT"] = "development"

from fakes import VIDEO_ID, WordTokenizer, sample_transcript  # noqa: E402
from tubechat.utils.caching import FileTranscriptStore  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Remove the test data directory once the session ends."""
    yield
    shutil.rmtree(TEST_DATA_DIR, ignore_errors=True)


@pytest.fixture
def video_id():
    """Return a valid YouTube video id."""
    return VIDEO_ID


@pytest.fixture
def transcript():
    """Return a short two segment transcript."""
    return sample_transcript()


@pytest.fixture
def store(tmp_path):
    """Return a file store in a temporary directory."""
    return FileTranscriptStore(tmp_path / "cache")


@pytest.fixture
def word_tokenizer():
    return WordTokenizer()
