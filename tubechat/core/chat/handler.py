"""
Answers questions about a video from its transcript.
"""

from typing import Any, Dict, List, Optional, Sequence

from langchain.chat_models import init_chat_model
from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from tubechat.config import config
from tubechat.core.context_selector import ContextSelector
from tubechat.core.prompts import (
    answer_system_template,
    answer_user_template,
    general_system_template,
)
from tubechat.models.schemas import AnswerResult, Timestamp, TranscriptSegment
from tubechat.utils.error_handling import AnswerGenerationError
from tubechat.utils.helpers import format_timestamp
from tubechat.utils.logger import logging

EMPTY_TRANSCRIPT_MESSAGE = (
    "I couldn't transcribe this video. This might be due to the video length or "
    "format. Please try a different video."
)


def format_transcript(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as `[MM:SS - MM:SS] text` lines."""
    return "\n".join(
        f"[{format_timestamp(segment.start)} - {format_timestamp(segment.end)}] {segment.text}"
        for segment in segments
    )


def parse_timestamps(raw_timestamps: Any) -> List[Timestamp]:
    """Keep the cited timestamps that carry a usable number of seconds."""
    timestamps = []
    for item in raw_timestamps or []:
        if not isinstance(item, dict):
            continue
        try:
            seconds = float(item.get("seconds"))
        except (TypeError, ValueError):
            continue
        timestamps.append(Timestamp(seconds=seconds, label=item.get("description")))
    return timestamps


class ChatAnswerer:
    """Class to answer user questions grounded in a transcript."""

    def __init__(
        self,
        selector: Optional[ContextSelector] = None,
        model: str = config.CHAT_MODEL,
        llm=None,
    ):
        self.selector = selector or ContextSelector()
        self.model = model
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = init_chat_model(
                model=self.model,
                model_provider="groq",
                temperature=0.3,
            )
        return self._llm

    async def answer(self, question: str, transcript: Sequence[TranscriptSegment]) -> AnswerResult:
        """
        Answer a question about a video.

        Args:
            question: The user's question
            transcript: Full transcript of the video

        Returns:
            The answer and the timestamps it cites
        """
        if not transcript:
            return AnswerResult(text=EMPTY_TRANSCRIPT_MESSAGE)

        context = self.selector.get_relevant_context(question, transcript)
        logging.info(f"Answering with {len(context)} of {len(transcript)} segments")

        prompt = ChatPromptTemplate.from_messages([
            ("system", answer_system_template),
            ("human", answer_user_template),
        ])
        chain = prompt | self.llm | JsonOutputParser()

        try:
            reply: Dict[str, Any] = await chain.ainvoke({
                "transcript": format_transcript(context),
                "question": question,
            })
        except OutputParserException as e:
            raise AnswerGenerationError(f"Unparseable answer from chat model: {e}") from e
        except Exception as e:
            logging.error(f"Error processing query with AI: {e}")
            raise AnswerGenerationError(str(e)) from e

        if not isinstance(reply, dict) or not reply.get("answer"):
            raise AnswerGenerationError("Empty response from AI")

        return AnswerResult(text=str(reply["answer"]), timestamps=parse_timestamps(reply.get("timestamps")))

    async def answer_general(self, question: str) -> AnswerResult:
        """Answer a question that is not about any particular video."""
        prompt = ChatPromptTemplate.from_messages([
            ("system", general_system_template),
            ("human", "{question}"),
        ])
        chain = prompt | self.llm | StrOutputParser()
        try:
            text = await chain.ainvoke({"question": question})
        except Exception as e:
            logging.error(f"Error in general conversation: {e}")
            raise AnswerGenerationError(str(e)) from e
        return AnswerResult(text=text or "I couldn't process your request.")
