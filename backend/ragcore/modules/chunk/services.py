"""Text chunking under a token budget."""

import math
from typing import List, Optional

from ...infrastructure.logging import get_logger
from ..common.constants import SOURCE_TEXT
from ..common.exceptions import ValidationError
from ..common.utils.token_estimator import TokenEstimator
from .schemas import ChunkingConfig, TextChunk

logger = get_logger(__name__)


class ChunkingService:
    """Split arbitrary-length text into ordered chunks that fit the embedding budget.

    Two strategies are used:

    - Word ranges (default). The word list is split recursively in two. A range
      longer than ``max_words`` is cut on the sliding-window grid
      (``max_words - overlap_words`` words per step) so that neighbouring chunks
      share ``overlap_words`` words. A range that fits ``max_words`` but still
      exceeds the token ceiling is cut at its midpoint, the halves sharing
      ``overlap_words`` words between them; once such a range is down to
      ``small_range_words`` words it is chunked by characters instead.
    - Character windows. Used for the whole input when the average word is
      longer than ``long_word_threshold`` characters (URLs, base64, minified
      code), where counting words says nothing about size.

    Every recursion strictly shrinks its range, so chunking terminates and
    produces O(n) chunks. The service holds no mutable state; one instance can
    be shared freely.
    """

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig.from_settings()
        self.estimator = TokenEstimator(self.config.chars_per_token)

    def chunk_text(
        self,
        text: str,
        max_words: Optional[int] = None,
        overlap_words: Optional[int] = None,
        source: str = SOURCE_TEXT,
    ) -> List[TextChunk]:
        """Split text into chunks.

        Args:
            text: Raw input text
            max_words: Upper bound of words per chunk
            overlap_words: Words shared by neighbouring chunks on the word path
            source: Provenance tag stored on each chunk

        Returns:
            Chunks with contiguous ``chunk_index`` values ``0..N-1``. Empty or
            whitespace-only input yields an empty list.

        Raises:
            ValidationError: If max_words or overlap_words are out of range
        """
        max_words = self.config.default_max_words if max_words is None else max_words
        overlap_words = self.config.default_overlap_words if overlap_words is None else overlap_words

        if max_words < 1:
            raise ValidationError(f"max_words must be at least 1, got {max_words}")
        if overlap_words < 0 or overlap_words >= max_words:
            raise ValidationError(f"overlap_words must be in [0, {max_words}), got {overlap_words}")

        if not text or not text.strip():
            return []

        words = text.split()
        avg_word_length = len(text) / len(words)

        logger.debug(
            f"Chunking input: {len(words)} words, {len(text)} chars, avg {avg_word_length:.1f} chars/word",
            extra={"word_count": len(words), "char_count": len(text)},
        )

        if avg_word_length > self.config.long_word_threshold:
            logger.info(
                f"Average word length {avg_word_length:.1f} exceeds {self.config.long_word_threshold}, "
                "using character-based chunking"
            )
            pieces = self._split_by_characters(text)
        else:
            pieces = self._split_word_range(words, 0, len(words), max_words, overlap_words)

        chunks = [TextChunk(text=piece, chunk_index=index, source=source) for index, piece in enumerate(pieces)]

        logger.info(f"Chunking completed: {len(chunks)} chunks from {len(words)} words")
        if len(words) >= 50 and len(chunks) > len(words) / 50:
            logger.warning(f"Created {len(chunks)} chunks from {len(words)} words, more than one chunk per 50 words")

        return chunks

    def _split_word_range(self, words: List[str], start: int, end: int, max_words: int, overlap_words: int) -> List[str]:
        """Chunk ``words[start:end]``; returns trimmed, non-empty chunk texts in order."""
        count = end - start

        if count <= max_words:
            candidate = " ".join(words[start:end])
            if self.estimator.fits(candidate, self.config.max_tokens):
                return [candidate]

            if count <= self.config.small_range_words or count == 1:
                logger.debug(f"Range of {count} words still exceeds the token ceiling, using character-based chunking")
                return self._split_by_characters(candidate)

            first_end, second_start = self._midpoint_bounds(start, end, overlap_words)
        else:
            first_end, second_start = self._window_grid_bounds(start, end, max_words, overlap_words)

        return self._split_word_range(words, start, first_end, max_words, overlap_words) + self._split_word_range(
            words, second_start, end, max_words, overlap_words
        )

    @staticmethod
    def _window_grid_bounds(start: int, end: int, max_words: int, overlap_words: int) -> tuple[int, int]:
        """Split a range longer than ``max_words`` between sliding windows.

        The range holds ``windows`` windows of ``max_words`` words advancing by
        ``step``; the first half of them goes left. The left range ends
        ``overlap_words`` past the cut, so the halves share exactly that many words.
        """
        step = max_words - overlap_words
        windows = math.ceil((end - start - overlap_words) / step)
        cut = start + ((windows + 1) // 2) * step
        return cut + overlap_words, cut

    @staticmethod
    def _midpoint_bounds(start: int, end: int, overlap_words: int) -> tuple[int, int]:
        """Split at the midpoint, each half reaching half the overlap past it."""
        mid = (start + end) // 2
        half_overlap = overlap_words // 2
        first_end = min(end, mid + half_overlap)
        second_start = max(start, mid - half_overlap)

        if first_end >= end or second_start <= start:
            return mid, mid
        return first_end, second_start

    def _split_by_characters(self, text: str) -> List[str]:
        """Chunk text into fixed character windows with character overlap.

        A window holds at most ``max_tokens * chars_per_token * char_safety_margin``
        characters. A window that does not reach the end of the text is cut back
        to its last space when that space lies in the window's final 20%. The window
        that reaches the end of the text is the last one.
        """
        window = max(1, self.estimator.tokens_to_chars(self.config.max_tokens * self.config.char_safety_margin))
        overlap = math.floor(window * self.config.char_overlap_ratio)

        logger.debug(f"Character-based chunking: {len(text)} chars, max {window} chars/chunk")

        pieces: List[str] = []
        position = 0
        while position < len(text):
            window_end = min(position + window, len(text))
            piece = text[position:window_end]

            if window_end < len(text):
                last_space = piece.rfind(" ")
                if last_space > window * 0.8:
                    piece = piece[:last_space]

            trimmed = piece.strip()
            if trimmed:
                pieces.append(trimmed)

            if window_end == len(text):
                break

            position += max(len(piece) - overlap, min(self.config.min_char_progress, len(piece)))

        return pieces
