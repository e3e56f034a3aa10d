"""Chunk → embed → store pipeline used by ingestion collaborators."""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.embedding import EmbeddingGenerator, get_embedding_generator
from ...infrastructure.logging import generate_correlation_id, get_logger, set_correlation_id
from ..chunk.schemas import TextChunk
from ..chunk.services import ChunkingService
from ..common.constants import PAGE_SOURCE_TEMPLATE, SOURCE_TEXT
from ..common.exceptions import ChunkTooLargeError, StoreError, StoreWriteError
from ..embedding.schemas import EmbeddingMetadata, EmbeddingRecordCreate
from ..embedding.services import EmbeddingBatchWriter, EmbeddingStoreService
from .schemas import CrawlPage, IngestionResult, OCRPage

logger = get_logger(__name__, component="ingestion")


class IngestionService:
    """Turns raw text into stored embeddings for a widget.

    Chunks are embedded one at a time, in chunk order, and written through an
    ``EmbeddingBatchWriter``. Chunk indices are fixed when the text is chunked,
    before any embedding call.

    Failure behaviour:
    - ``ChunkTooLargeError`` for a chunk is logged and the chunk is skipped.
    - ``EmbeddingGenerationError`` and store errors propagate. Batches written
      before the failure stay written; clearing the file with
      ``reingest_file`` and running again is safe because chunking is
      deterministic.
    """

    def __init__(
        self,
        chunking: Optional[ChunkingService] = None,
        generator: Optional[EmbeddingGenerator] = None,
        store: Optional[EmbeddingStoreService] = None,
        batch_size: Optional[int] = None,
    ):
        self.chunking = chunking or ChunkingService()
        self.generator = generator or get_embedding_generator()
        self.store = store or EmbeddingStoreService()
        self.batch_size = batch_size or get_settings().EMBEDDING_BATCH_SIZE

    async def ingest_text(
        self,
        widget_id: str,
        content: str,
        db: AsyncSession,
        file_id: Optional[str] = None,
        source: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> IngestionResult:
        """Chunk, embed and store one text (a manual entry or an uploaded file).

        Args:
            widget_id: Owning widget
            content: Raw text
            db: Database session
            file_id: Owning file, if any
            source: Source tag for every chunk, e.g. "file" or "crawl"
            metadata: Extra metadata copied onto every record

        Returns:
            Counters for the call
        """
        self._start_run()
        return await self._ingest_text(widget_id, content, db, file_id=file_id, source=source, metadata=metadata)

    async def _ingest_text(
        self,
        widget_id: str,
        content: str,
        db: AsyncSession,
        file_id: Optional[str],
        source: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> IngestionResult:
        chunks = self._tag_chunks(
            self.chunking.chunk_text(content, source=source or SOURCE_TEXT), widget_id=widget_id, file_id=file_id
        )

        async with EmbeddingBatchWriter(self.store, db, batch_size=self.batch_size) as writer:
            skipped = await self._embed_chunks(chunks, writer, metadata or {})

        logger.info(
            f"Created {writer.total_written} embeddings from {len(chunks)} chunks",
            extra={"widget_id": widget_id, "file_id": file_id, "skipped": skipped},
        )
        return IngestionResult(
            chunks_created=len(chunks),
            embeddings_stored=writer.total_written,
            chunks_skipped=skipped,
            file_id=file_id,
        )

    async def ingest_ocr_pages(
        self, widget_id: str, file_id: str, pages: Sequence[OCRPage], db: AsyncSession
    ) -> IngestionResult:
        """Chunk, embed and store OCR'd pages; each chunk is tagged ``page_N``."""
        self._start_run()
        return await self._ingest_pages(widget_id, file_id, pages, db)

    async def ingest_crawl_pages(
        self, widget_id: str, file_id: str, pages: Sequence[CrawlPage], db: AsyncSession
    ) -> IngestionResult:
        """Chunk, embed and store crawled pages, copying page metadata onto each record.

        Raises:
            StoreWriteError: If the store cannot be reached before any work starts
        """
        self._start_run()

        try:
            existing = await self.store.count_for_widget(widget_id, db)
        except StoreError as e:
            logger.error(f"Store connectivity check failed: {e}", extra={"widget_id": widget_id})
            raise StoreWriteError("Database connection failed") from e

        logger.info(
            f"Ingesting {len(pages)} crawled pages, widget currently has {existing} embeddings",
            extra={"widget_id": widget_id, "file_id": file_id},
        )
        return await self._ingest_pages(widget_id, file_id, pages, db)

    async def reingest_file(
        self,
        widget_id: str,
        file_id: str,
        content: str,
        db: AsyncSession,
        source: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> IngestionResult:
        """Replace a file's embeddings: delete them, then ingest ``content`` again."""
        self._start_run()
        deleted = await self.store.delete_for_file(widget_id, file_id, db)
        logger.info(f"Cleared {deleted} embeddings before re-ingesting file", extra={"widget_id": widget_id, "file_id": file_id})

        return await self._ingest_text(widget_id, content, db, file_id=file_id, source=source, metadata=metadata)

    async def _ingest_pages(
        self, widget_id: str, file_id: str, pages: Sequence[OCRPage], db: AsyncSession
    ) -> IngestionResult:
        result = IngestionResult(file_id=file_id)

        async with EmbeddingBatchWriter(self.store, db, batch_size=self.batch_size) as writer:
            for page in pages:
                if not page.markdown or not page.markdown.strip():
                    continue

                source = PAGE_SOURCE_TEMPLATE.format(page_number=page.page_number)
                chunks = self._tag_chunks(
                    self.chunking.chunk_text(page.markdown, source=source),
                    widget_id=widget_id,
                    file_id=file_id,
                    page_number=page.page_number,
                )
                logger.debug(
                    f"Page {page.page_number}: {len(chunks)} chunks from {len(page.markdown)} characters",
                    extra={"widget_id": widget_id, "file_id": file_id},
                )

                page_metadata = page.metadata if isinstance(page, CrawlPage) else {}
                result.chunks_skipped += await self._embed_chunks(chunks, writer, page_metadata)
                result.chunks_created += len(chunks)
                result.pages_processed += 1

        result.embeddings_stored = writer.total_written
        logger.info(
            f"Created {result.embeddings_stored} embeddings for {result.pages_processed} pages",
            extra={"widget_id": widget_id, "file_id": file_id, "batches": writer.batches_written},
        )
        return result

    async def _embed_chunks(
        self, chunks: List[TextChunk], writer: EmbeddingBatchWriter, extra_metadata: Dict[str, Any]
    ) -> int:
        """Embed chunks in order and hand records to the writer; returns the number skipped."""
        skipped = 0

        for chunk in chunks:
            try:
                embedding = await self.generator.generate(chunk.text)
            except ChunkTooLargeError as e:
                logger.error(
                    f"Skipping chunk {chunk.chunk_index}: {e}",
                    extra={"widget_id": chunk.widget_id, "file_id": chunk.file_id, "source": chunk.source},
                )
                skipped += 1
                continue

            metadata = {
                **extra_metadata,
                "chunk_index": chunk.chunk_index,
                "source": chunk.source,
            }
            if chunk.page_number is not None:
                metadata["page_number"] = chunk.page_number

            await writer.add(
                EmbeddingRecordCreate(
                    widget_id=chunk.widget_id,
                    file_id=chunk.file_id,
                    content_chunk=chunk.text,
                    embedding=embedding,
                    metadata=EmbeddingMetadata(**metadata),
                )
            )

        return skipped

    @staticmethod
    def _start_run() -> str:
        """Give the records logged by this call their own correlation id."""
        correlation_id = generate_correlation_id()
        set_correlation_id(correlation_id)
        return correlation_id

    @staticmethod
    def _tag_chunks(
        chunks: List[TextChunk], widget_id: str, file_id: Optional[str], page_number: Optional[int] = None
    ) -> List[TextChunk]:
        return [
            chunk.model_copy(update={"widget_id": widget_id, "file_id": file_id, "page_number": page_number})
            for chunk in chunks
        ]
