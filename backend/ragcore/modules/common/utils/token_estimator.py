"""Token budget estimation without a tokenizer.

Embedding APIs reject inputs above a token limit, but running the model's real
tokenizer on every chunk candidate is expensive. The estimate here is a plain
character ratio that over-counts tokens for English prose, which keeps chunks
safely under the true limit.
"""

import math

DEFAULT_CHARS_PER_TOKEN = 3.5


class TokenEstimator:
    """Character-ratio token estimator.

    ``estimate(text) == ceil(len(text) / chars_per_token)``

    Example:
        >>> estimator = TokenEstimator(chars_per_token=3.5)
        >>> estimator.estimate("Hello world!")
        4
    """

    def __init__(self, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN):
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self.chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        """Estimate the token count of ``text``.

        Args:
            text: Input text

        Returns:
            Estimated token count, 0 for empty text
        """
        if not text:
            return 0
        return math.ceil(len(text) / self.chars_per_token)

    def fits(self, text: str, max_tokens: int) -> bool:
        """Check whether ``text`` is estimated to fit within ``max_tokens``."""
        return self.estimate(text) <= max_tokens

    def tokens_to_chars(self, tokens: float) -> int:
        """Largest character count whose estimate does not exceed ``tokens``."""
        return math.floor(tokens * self.chars_per_token)


def estimate_tokens(text: str, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> int:
    """Convenience function for a one-off estimate.

    Args:
        text: Input text
        chars_per_token: Characters counted as one token

    Returns:
        Estimated token count
    """
    return TokenEstimator(chars_per_token).estimate(text)
