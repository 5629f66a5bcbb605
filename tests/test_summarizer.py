"""
Tests for the social content generator module.
"""

import pytest
from unittest.mock import patch, AsyncMock

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from tubechat.core.summarizer import SocialContentGenerator, content_type_for_message
from tubechat.models.schemas import SocialContentType, TranscriptSegment
from tubechat.utils.error_handling import AnswerGenerationError


@pytest.fixture
def mock_langchain_model():
    """Fixture to mock the langchain chat model."""
    with patch('tubechat.core.summarizer.init_chat_model') as mock_init_model:
        mock_model = FakeListChatModel(responses=["Cats and dogs, explained in one tweet."])
        mock_init_model.return_value = mock_model
        yield mock_init_model


@pytest.fixture
def long_transcript():
    return [
        TranscriptSegment(text=f"Segment number {i} talks about something new.", start=i * 10.0, end=i * 10.0 + 9)
        for i in range(40)
    ]


@pytest.mark.parametrize("message, expected", [
    ("Make a thread out of this", SocialContentType.THREAD),
    ("Write a twitter post", SocialContentType.TWITTER),
    ("Draft a post for my followers", SocialContentType.TWITTER),
    ("Summarize the video", SocialContentType.SUMMARY),
])
def test_content_type_for_message(message, expected):
    """Test chat messages map to a social content type."""
    assert content_type_for_message(message) == expected


@pytest.mark.asyncio
async def test_generate(mock_langchain_model, transcript):
    """Test generating a tweet from a short transcript."""
    generator = SocialContentGenerator()
    content = await generator.generate("twitter", transcript)

    assert content == "Cats and dogs, explained in one tweet."
    assert mock_langchain_model.call_args.kwargs["model_provider"] == "groq"


@pytest.mark.asyncio
async def test_long_transcript_condensed_first(long_transcript):
    """Test long transcripts are summarized part by part before generating."""
    generator = SocialContentGenerator(
        chunk_size=200, chunk_overlap=0, llm=FakeListChatModel(responses=["Final thread"])
    )

    with patch.object(generator, "_condense", AsyncMock(return_value="condensed")) as condense:
        content = await generator.generate(SocialContentType.THREAD, long_transcript)

    condense.assert_awaited_once()
    assert len(condense.await_args.args[0]) > 1
    assert content == "Final thread"


@pytest.mark.asyncio
async def test_condense_joins_partial_summaries(long_transcript):
    """Test every part of a long transcript is summarized."""
    generator = SocialContentGenerator(
        chunk_size=200, chunk_overlap=0, llm=FakeListChatModel(responses=["partial"])
    )

    content = await generator.generate(SocialContentType.SUMMARY, long_transcript)

    assert content == "partial"


@pytest.mark.asyncio
async def test_generate_model_failure(transcript):
    """Test model errors surface as AnswerGenerationError."""
    def fail(_):
        raise RuntimeError("rate limited")

    generator = SocialContentGenerator(llm=RunnableLambda(fail))

    with pytest.raises(AnswerGenerationError):
        await generator.generate(SocialContentType.SUMMARY, transcript)
