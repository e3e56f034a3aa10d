"""Domain exception classes for the chunk, embed, store and retrieve pipeline."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ValidationError(DomainError):
    """Raised when caller-supplied arguments are invalid."""

    pass


class ChunkTooLargeError(DomainError):
    """Raised when a chunk's estimated token count exceeds the embedding ceiling.

    This is a caller-contract violation: the chunker should never produce such a
    chunk. The text is never truncated to make it fit.
    """

    def __init__(self, estimated_tokens: int, max_tokens: int, char_length: int):
        self.estimated_tokens = estimated_tokens
        self.max_tokens = max_tokens
        self.char_length = char_length
        super().__init__(
            f"Text chunk too large for embedding: {estimated_tokens} estimated tokens "
            f"({char_length} characters). Maximum is {max_tokens} tokens."
        )


class EmbeddingGenerationError(DomainError):
    """Raised when the embedding provider fails (transport, rate limit, auth, malformed response)."""

    pass


class StoreError(DomainError):
    """Base class for embedding persistence failures."""

    pass


class StoreWriteError(StoreError):
    """Raised when a batch of embedding records could not be written."""

    pass


class StoreDeleteError(StoreError):
    """Raised when embedding records could not be deleted."""

    pass
