"""
Module for generating social media content from transcripts using LLM models.
"""

from typing import Sequence, Union

from langchain.chat_models import init_chat_model
from langchain_core.documents import Document
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_text_splitters import RecursiveCharacterTextSplitter

from tubechat.config import config
from tubechat.core.prompts import (
    map_system_template,
    social_instructions,
    social_system_template,
    social_user_template,
)
from tubechat.models.schemas import SocialContentType, TranscriptSegment
from tubechat.utils.error_handling import AnswerGenerationError
from tubechat.utils.logger import logging


def content_type_for_message(message: str) -> SocialContentType:
    """Pick the kind of social content a chat message asks for."""
    message = message.lower()
    if "thread" in message:
        return SocialContentType.THREAD
    if "twitter" in message or "post" in message:
        return SocialContentType.TWITTER
    return SocialContentType.SUMMARY


class SocialContentGenerator:
    """Class to turn a transcript into tweets, threads or summaries."""

    def __init__(
        self,
        model: str = config.CHAT_MODEL,
        chunk_size: int = 24000,
        chunk_overlap: int = 400,
        llm=None,
    ):
        self.model = model
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = init_chat_model(
                model=self.model,
                model_provider="groq",
                temperature=0.7,
            )
        return self._llm

    async def generate(
        self,
        content_type: Union[SocialContentType, str],
        transcript: Sequence[TranscriptSegment],
    ) -> str:
        """
        Generate social media content from a transcript.

        Args:
            content_type: twitter, thread or summary
            transcript: Full transcript of the video

        Returns:
            The generated content
        """
        content_type = SocialContentType(content_type)
        transcript_text = " ".join(segment.text for segment in transcript)

        # For longer transcripts, split into chunks
        text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap
        )
        docs = text_splitter.split_documents([Document(page_content=transcript_text)])

        try:
            if len(docs) > 1:
                transcript_text = await self._condense(docs)

            prompt = ChatPromptTemplate.from_messages([
                ("system", social_system_template),
                ("human", social_user_template),
            ])
            chain = prompt | self.llm | StrOutputParser()
            content = await chain.ainvoke({
                "text": transcript_text,
                "instruction": social_instructions[content_type.value],
            })
        except Exception as e:
            logging.error(f"Error generating social content: {e}")
            raise AnswerGenerationError(str(e)) from e

        return content or "Could not generate content."

    async def _condense(self, docs: Sequence[Document]) -> str:
        """Summarize each part of a long transcript and join the partial summaries."""
        logging.info(f"Condensing transcript in {len(docs)} parts")
        map_prompt = ChatPromptTemplate.from_messages([
            ("system", map_system_template)
        ])
        map_chain = map_prompt | self.llm | StrOutputParser()

        interim_summaries = []
        for doc in docs:
            interim_summaries.append(await map_chain.ainvoke({"text": doc.page_content}))
        return "\n\n".join(interim_summaries)
