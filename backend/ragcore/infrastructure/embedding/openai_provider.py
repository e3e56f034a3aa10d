"""OpenAI-compatible embedding provider."""

from typing import List, Optional

from openai import AsyncOpenAI


class OpenAIEmbeddingProvider:
    """Embedding provider using an OpenAI-compatible embeddings API.

    The SDK's own retries are disabled; callers own the retry policy.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "text-embedding-3-small",
        dimension: int = 1536,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model_name = model_name
        self._dimension = dimension
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    @property
    def embedding_dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> List[float]:
        """Generate the embedding for a single text."""
        response = await self._client.embeddings.create(
            model=self.model_name,
            input=text,
            encoding_format="float",
        )
        return list(response.data[0].embedding)
