"""
Selects the part of a transcript that fits the chat model's context budget.
"""

import re
from typing import List, NamedTuple, Optional, Protocol, Sequence

import tiktoken

from tubechat.config import config
from tubechat.models.schemas import TranscriptSegment

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "is", "are", "was", "were",
    "in", "on", "at", "to", "for", "with", "about", "of", "by",
    "how", "what", "when", "where", "why", "who", "which",
    "do", "does", "did", "have", "has", "had", "am", "be", "been", "being",
    "this", "that", "these", "those", "there", "their", "they",
})

# Below this share of the budget a partial segment is still worth adding.
TRUNCATION_THRESHOLD = 0.9


class Tokenizer(Protocol):
    def encode(self, text: str) -> List[int]: ...


class ScoredSegment(NamedTuple):
    segment: TranscriptSegment
    score: int


def extract_keywords(query: str) -> List[str]:
    """
    Extract search keywords from a query.

    Lowercases, strips punctuation, splits on whitespace and drops stop words
    and words of two characters or fewer.
    """
    words = re.sub(r"[^\w\s]", "", query.lower()).split()
    return [word for word in words if word not in STOP_WORDS and len(word) > 2]


def score_segment(segment: TranscriptSegment, keywords: Sequence[str]) -> int:
    """Count whole-word, case-insensitive keyword occurrences in a segment."""
    text = segment.text.lower()
    return sum(len(re.findall(rf"\b{re.escape(keyword)}\b", text)) for keyword in keywords)


class ContextSelector:
    """
    Picks relevant transcript segments under a token budget.

    Transcripts already within the budget pass through untouched. Longer ones
    are ranked by keyword relevance, filled greedily up to the budget and
    returned in chronological order. A query made only of stop words ranks
    every segment equally, so selection falls back to the earliest segments.
    """

    def __init__(
        self,
        max_tokens: int = config.MAX_CONTEXT_TOKENS,
        tokenizer: Optional[Tokenizer] = None,
        encoding_name: str = config.TOKENIZER_ENCODING,
    ):
        self.max_tokens = max_tokens
        self._tokenizer = tokenizer
        self._encoding_name = encoding_name

    @property
    def tokenizer(self) -> Tokenizer:
        # tiktoken fetches its vocabulary on first use, so load lazily.
        if self._tokenizer is None:
            self._tokenizer = tiktoken.get_encoding(self._encoding_name)
        return self._tokenizer

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return len(self.tokenizer.encode(text))

    def get_relevant_context(self, query: str, transcript: Sequence[TranscriptSegment]) -> List[TranscriptSegment]:
        """
        Select the transcript segments to send along with a query.

        Args:
            query: The user's question
            transcript: Full transcript sorted by start time

        Returns:
            Segments fitting the token budget, sorted by start time
        """
        if not transcript:
            return []

        full_text = " ".join(segment.text for segment in transcript)
        if self.count_tokens(full_text) <= self.max_tokens:
            return list(transcript)

        return self._filter_by_relevance(query, transcript)

    def _filter_by_relevance(self, query: str, transcript: Sequence[TranscriptSegment]) -> List[TranscriptSegment]:
        keywords = extract_keywords(query)
        scored = [ScoredSegment(segment, score_segment(segment, keywords)) for segment in transcript]
        # sorted() is stable: equal scores keep transcript order.
        scored = sorted(scored, key=lambda item: item.score, reverse=True)

        selected: List[TranscriptSegment] = []
        total_tokens = 0
        for segment, _ in scored:
            segment_tokens = self.count_tokens(segment.text)
            if total_tokens + segment_tokens <= self.max_tokens:
                selected.append(segment)
                total_tokens += segment_tokens
                continue

            if total_tokens < self.max_tokens * TRUNCATION_THRESHOLD:
                partial_text = self.truncate_text(segment.text, self.max_tokens - total_tokens)
                if partial_text:
                    selected.append(segment.model_copy(update={"text": partial_text}))
            break

        return sorted(selected, key=lambda segment: segment.start)

    def truncate_text(self, text: str, token_limit: int) -> str:
        """Keep whole words from the start of `text` while within `token_limit`."""
        result = ""
        current_tokens = 0
        for word in text.split():
            word_with_space = f" {word}" if result else word
            word_tokens = self.count_tokens(word_with_space)
            if current_tokens + word_tokens > token_limit:
                break
            result += word_with_space
            current_tokens += word_tokens
        return result
