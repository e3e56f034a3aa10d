"""Tests for the chunking service."""

import pytest

from ragcore.modules.chunk.schemas import ChunkingConfig, TextChunk
from ragcore.modules.chunk.services import ChunkingService
from ragcore.modules.common.exceptions import ValidationError
from ragcore.modules.common.utils.token_estimator import estimate_tokens


def numbered_words(count: int) -> str:
    return " ".join(f"w{i}" for i in range(count))


class TestChunkingService:
    """Test ChunkingService with default limits."""

    @pytest.fixture
    def service(self):
        return ChunkingService(ChunkingConfig())

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_empty_input_yields_no_chunks(self, service, text):
        assert service.chunk_text(text) == []

    def test_short_text_is_single_chunk(self, service):
        chunks = service.chunk_text("  Hello world, this is a short note.  ")

        assert len(chunks) == 1
        assert chunks[0] == TextChunk(text="Hello world, this is a short note.", chunk_index=0, source="text")

    def test_five_thousand_words_use_sliding_windows(self, service):
        text = numbered_words(5000)
        words = text.split()

        chunks = service.chunk_text(text, max_words=1000, overlap_words=100)

        assert 5 <= len(chunks) <= 6
        for chunk in chunks:
            assert len(chunk.text.split()) <= 1000
        for left, right in zip(chunks, chunks[1:]):
            assert left.text.split()[-100:] == right.text.split()[:100]

        rebuilt = chunks[0].text.split()
        for chunk in chunks[1:]:
            rebuilt.extend(chunk.text.split()[100:])
        assert rebuilt == words

    def test_chunk_indices_are_contiguous(self, service):
        chunks = service.chunk_text(numbered_words(2500), max_words=300, overlap_words=30)

        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))

    def test_chunks_are_trimmed_and_within_budget(self, service):
        text = "\n\n".join(f"Paragraph {i}. " + "lorem ipsum dolor sit amet " * 40 for i in range(60))

        chunks = service.chunk_text(text)

        assert chunks
        for chunk in chunks:
            assert chunk.text == chunk.text.strip()
            assert chunk.text
            assert estimate_tokens(chunk.text) <= 8000

    def test_chunking_is_deterministic(self, service):
        text = numbered_words(3300)

        assert service.chunk_text(text, max_words=700, overlap_words=50) == service.chunk_text(
            text, max_words=700, overlap_words=50
        )

    def test_zero_overlap_partitions_words(self, service):
        text = numbered_words(950)

        chunks = service.chunk_text(text, max_words=100, overlap_words=0)

        assert sum(len(c.text.split()) for c in chunks) == 950
        assert " ".join(c.text for c in chunks) == text

    def test_source_tag_is_applied(self, service):
        chunks = service.chunk_text(numbered_words(10), source="page_3")

        assert chunks[0].source == "page_3"

    @pytest.mark.parametrize(
        "max_words, overlap_words",
        [(0, 0), (-5, 0), (100, 100), (100, 150), (100, -1)],
    )
    def test_invalid_limits_raise(self, service, max_words, overlap_words):
        with pytest.raises(ValidationError):
            service.chunk_text("some text", max_words=max_words, overlap_words=overlap_words)

    def test_defaults_come_from_config(self):
        service = ChunkingService(ChunkingConfig(default_max_words=10, default_overlap_words=2))

        chunks = service.chunk_text(numbered_words(26))

        assert all(len(c.text.split()) <= 10 for c in chunks)
        assert chunks[0].text.split()[-2:] == chunks[1].text.split()[:2]


class TestTokenCeiling:
    """Ranges that fit max_words but not the token ceiling."""

    def test_midpoint_split_until_within_ceiling(self):
        config = ChunkingConfig(max_tokens=50, small_range_words=10, default_max_words=1000, default_overlap_words=0)
        service = ChunkingService(config)
        text = " ".join(["alpha"] * 200)

        chunks = service.chunk_text(text)

        assert len(chunks) == 8
        assert all(estimate_tokens(c.text) <= 50 for c in chunks)
        assert sum(len(c.text.split()) for c in chunks) == 200

    def test_small_range_falls_back_to_characters(self):
        config = ChunkingConfig(max_tokens=20, default_max_words=1000, default_overlap_words=0)
        service = ChunkingService(config)
        text = " ".join(["abcdefghijklmno"] * 30)

        chunks = service.chunk_text(text)

        assert len(chunks) > 1
        assert all(estimate_tokens(c.text) <= 20 for c in chunks)
        assert all(len(c.text) <= 63 for c in chunks)


class TestCharacterChunking:
    """Inputs dominated by very long words."""

    def test_long_token_without_spaces(self):
        service = ChunkingService(ChunkingConfig(max_tokens=10))
        text = "x" * 50

        chunks = service.chunk_text(text)

        assert len(chunks) == 2
        assert "".join(c.text for c in chunks) == text
        assert all(estimate_tokens(c.text) <= 10 for c in chunks)
        assert [c.chunk_index for c in chunks] == [0, 1]

    def test_url_heavy_text_uses_character_windows(self):
        service = ChunkingService(ChunkingConfig())
        text = " ".join(f"https://example.com/page{i:04d}" + "a" * 196 for i in range(136))

        chunks = service.chunk_text(text)

        assert len(chunks) == 2
        assert chunks[1].text not in chunks[0].text
        assert all(estimate_tokens(c.text) <= 8000 for c in chunks)
        assert all(len(c.text) <= 25200 for c in chunks)

    def test_windows_step_by_window_minus_overlap(self):
        # window = floor(100 * 0.9 * 3.5) = 315 chars, overlap = 31 chars
        service = ChunkingService(ChunkingConfig(max_tokens=100))
        text = "".join(f"{i:04d}" for i in range(200))[:790]

        chunks = service.chunk_text(text)

        assert [c.text for c in chunks] == [text[0:315], text[284:599], text[568:790]]
        for left, right in zip(chunks, chunks[1:]):
            assert left.text[-31:] == right.text[:31]
            assert right.text not in left.text

        rebuilt = chunks[0].text + "".join(c.text[31:] for c in chunks[1:])
        assert rebuilt == text

    def test_last_window_ends_chunking(self):
        service = ChunkingService(ChunkingConfig(max_tokens=100))

        chunks = service.chunk_text("x" * 400)

        assert [len(c.text) for c in chunks] == [315, 116]

    def test_window_breaks_at_late_space(self):
        service = ChunkingService(ChunkingConfig(max_tokens=20))
        text = "x" * 55 + " " + "y" * 100

        pieces = service._split_by_characters(text)

        assert pieces[0] == "x" * 55
        assert all(len(p) <= 63 for p in pieces)


class TestChunkingConfig:
    """Test ChunkingConfig."""

    def test_overlap_must_be_smaller_than_max_words(self):
        with pytest.raises(ValueError):
            ChunkingConfig(default_max_words=100, default_overlap_words=100)

    def test_from_settings_uses_defaults(self):
        config = ChunkingConfig.from_settings()

        assert config.default_max_words == 1000
        assert config.default_overlap_words == 100
        assert config.max_tokens == 8000
        assert config.chars_per_token == 3.5
