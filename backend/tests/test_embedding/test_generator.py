"""Tests for the embedding generator."""

import asyncio

import pytest

from ragcore.infrastructure.config.settings import EmbeddingProviderOption, get_settings
from ragcore.infrastructure.embedding import EmbeddingGenerator, create_embedding_provider
from ragcore.infrastructure.embedding.openai_provider import OpenAIEmbeddingProvider
from ragcore.infrastructure.embedding.sentence_transformer_provider import SentenceTransformerEmbeddingProvider
from ragcore.modules.common.exceptions import ChunkTooLargeError, EmbeddingGenerationError, ValidationError


class TestEmbeddingGenerator:
    """Test EmbeddingGenerator."""

    @pytest.mark.asyncio
    async def test_generate_returns_provider_vector(self, generator, fake_provider):
        fake_provider.vectors["hello world"] = [0.1, 0.2, 0.3]

        embedding = await generator.generate("hello world")

        assert embedding == [0.1, 0.2, 0.3]
        assert fake_provider.calls == ["hello world"]

    @pytest.mark.asyncio
    async def test_newlines_are_collapsed_before_embedding(self, generator, fake_provider):
        await generator.generate("  first line\nsecond line\r\nthird  ")

        assert fake_provider.calls == ["first line second line third"]

    @pytest.mark.asyncio
    async def test_oversized_text_fails_without_provider_call(self, fake_provider):
        generator = EmbeddingGenerator(fake_provider, max_tokens=5, chars_per_token=3.5)

        with pytest.raises(ChunkTooLargeError) as exc_info:
            await generator.generate("x" * 100)

        assert fake_provider.calls == []
        assert exc_info.value.estimated_tokens == 29
        assert exc_info.value.max_tokens == 5
        assert exc_info.value.char_length == 100
        assert "29 estimated tokens" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_text_at_ceiling_is_embedded(self, fake_provider):
        generator = EmbeddingGenerator(fake_provider, max_tokens=10, chars_per_token=3.5)

        await generator.generate("x" * 35)

        assert len(fake_provider.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    async def test_empty_text_is_rejected(self, generator, fake_provider, text):
        with pytest.raises(ValidationError):
            await generator.generate(text)

        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, generator, fake_provider):
        fake_provider.error = ConnectionError("connection reset")

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            await generator.generate("question")

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_malformed_vector_is_rejected(self, generator, fake_provider):
        fake_provider.vectors["question"] = [1.0, 2.0]

        with pytest.raises(EmbeddingGenerationError, match="expected 3 dimensions, got 2"):
            await generator.generate("question")

    @pytest.mark.asyncio
    async def test_empty_vector_is_rejected(self, generator, fake_provider):
        fake_provider.vectors["question"] = []

        with pytest.raises(EmbeddingGenerationError):
            await generator.generate("question")

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        started = asyncio.Event()

        class SlowProvider:
            model_name = "slow"
            embedding_dimension = 3

            async def embed(self, text):
                started.set()
                await asyncio.sleep(60)
                return [0.0, 0.0, 0.0]

        generator = EmbeddingGenerator(SlowProvider())
        task = asyncio.create_task(generator.generate("question"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    def test_model_properties_come_from_provider(self, generator):
        assert generator.model_name == "fake-embedding"
        assert generator.embedding_dimension == 3


class TestCreateEmbeddingProvider:
    """Test provider selection from settings."""

    def test_openai_provider(self):
        settings = get_settings().model_copy(
            update={
                "EMBEDDING_PROVIDER": EmbeddingProviderOption.OPENAI,
                "OPENAI_API_KEY": "test-key",
                "EMBEDDING_MODEL": "text-embedding-3-small",
                "EMBEDDING_DIMENSION": 1536,
            }
        )

        provider = create_embedding_provider(settings)

        assert isinstance(provider, OpenAIEmbeddingProvider)
        assert provider.model_name == "text-embedding-3-small"
        assert provider.embedding_dimension == 1536

    def test_local_provider(self):
        settings = get_settings().model_copy(
            update={
                "EMBEDDING_PROVIDER": EmbeddingProviderOption.LOCAL,
                "LOCAL_EMBEDDING_MODEL": "all-mpnet-base-v2",
                "EMBEDDING_DIMENSION": 768,
            }
        )

        provider = create_embedding_provider(settings)

        assert isinstance(provider, SentenceTransformerEmbeddingProvider)
        assert provider.model_name == "all-mpnet-base-v2"
        assert provider.embedding_dimension == 768
