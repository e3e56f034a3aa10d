"""Persistence of embedded chunks scoped to widgets and files."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import StoreDeleteError, StoreError, StoreWriteError, ValidationError
from .crud import widget_embedding_crud
from .models import WidgetEmbedding
from .schemas import EmbeddingRecordCreate, StoredVector

logger = get_logger(__name__)


class EmbeddingStoreService:
    """Service for writing, counting, loading and deleting widget embeddings.

    Records are immutable: there is no update operation. Every write or delete
    call is its own transaction.
    """

    async def bulk_insert(self, records: Sequence[EmbeddingRecordCreate], db: AsyncSession) -> int:
        """Insert a batch of records with a single statement.

        Args:
            records: Records to insert
            db: Database session

        Returns:
            Number of records written

        Raises:
            StoreWriteError: If the batch could not be written; nothing from the batch is kept
        """
        if not records:
            return 0

        now = datetime.now(timezone.utc)
        rows = [
            {
                "id": uuid.uuid4(),
                "widget_id": record.widget_id,
                "file_id": record.file_id,
                "content_chunk": record.content_chunk,
                "embedding": record.embedding,
                "extra_metadata": record.metadata.to_storage(),
                "created_at": now,
            }
            for record in records
        ]

        try:
            await db.execute(insert(WidgetEmbedding), rows)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to insert batch of {len(rows)} embeddings: {e}", extra={"batch_size": len(rows)})
            raise StoreWriteError(f"Failed to insert batch of {len(rows)} embeddings") from e

        logger.debug(f"Inserted batch of {len(rows)} embeddings", extra={"widget_id": records[0].widget_id})
        return len(rows)

    async def delete_for_widget(self, widget_id: str, db: AsyncSession) -> int:
        """Delete every embedding owned by a widget.

        Args:
            widget_id: Widget whose embeddings are removed
            db: Database session

        Returns:
            Number of records deleted

        Raises:
            StoreDeleteError: If the delete failed
        """
        stmt = delete(WidgetEmbedding).where(WidgetEmbedding.widget_id == widget_id)
        deleted = await self._execute_delete(stmt, db, widget_id=widget_id)

        logger.info(f"Deleted {deleted} embeddings for widget", extra={"widget_id": widget_id})
        return deleted

    async def delete_for_file(self, widget_id: str, file_id: str, db: AsyncSession) -> int:
        """Delete the embeddings of one file within a widget.

        Args:
            widget_id: Widget owning the file
            file_id: File whose embeddings are removed
            db: Database session

        Returns:
            Number of records deleted

        Raises:
            StoreDeleteError: If the delete failed
        """
        stmt = delete(WidgetEmbedding).where(
            WidgetEmbedding.widget_id == widget_id,
            WidgetEmbedding.file_id == file_id,
        )
        deleted = await self._execute_delete(stmt, db, widget_id=widget_id, file_id=file_id)

        logger.info(f"Deleted {deleted} embeddings for file", extra={"widget_id": widget_id, "file_id": file_id})
        return deleted

    async def _execute_delete(self, stmt, db: AsyncSession, **context) -> int:
        try:
            result = await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to delete embeddings: {e}", extra=context)
            raise StoreDeleteError(f"Failed to delete embeddings for {context}") from e

        return result.rowcount or 0

    async def count_for_widget(self, widget_id: str, db: AsyncSession) -> int:
        """Count the embeddings owned by a widget.

        Raises:
            StoreError: If the store could not be queried
        """
        try:
            return await widget_embedding_crud.count(db=db, widget_id=widget_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count embeddings for widget {widget_id}") from e

    async def fetch_vectors(self, db: AsyncSession, widget_id: Optional[str] = None) -> List[StoredVector]:
        """Load stored vectors for ranking, optionally restricted to one widget.

        Args:
            db: Database session
            widget_id: Only load this widget's vectors when given

        Returns:
            Stored vectors, in no particular order

        Raises:
            StoreError: If the store could not be queried
        """
        stmt = select(
            WidgetEmbedding.widget_id,
            WidgetEmbedding.content_chunk,
            WidgetEmbedding.embedding,
            WidgetEmbedding.extra_metadata,
        )
        if widget_id is not None:
            stmt = stmt.where(WidgetEmbedding.widget_id == widget_id)

        try:
            result = await db.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load embeddings: {e}", extra={"widget_id": widget_id})
            raise StoreError(f"Failed to load embeddings for widget {widget_id}") from e

        return [
            StoredVector(
                widget_id=row.widget_id,
                content_chunk=row.content_chunk,
                embedding=list(row.embedding),
                metadata=row.extra_metadata or {},
            )
            for row in rows
        ]


class EmbeddingBatchWriter:
    """Accumulates records and writes them in fixed-size batches.

    ``add`` buffers a record and flushes once ``batch_size`` records are
    pending; ``flush`` writes whatever is pending. Batches are independent
    transactions: when a flush fails, earlier batches stay written and the
    failed batch stays pending, so calling ``flush`` again retries it.

    Example:
        ```python
        async with EmbeddingBatchWriter(store, db, batch_size=10) as writer:
            for record in records:
                await writer.add(record)
        print(writer.total_written)
        ```
    """

    def __init__(self, store: EmbeddingStoreService, db: AsyncSession, batch_size: int = 10):
        if batch_size < 1:
            raise ValidationError(f"batch_size must be at least 1, got {batch_size}")
        self.store = store
        self.db = db
        self.batch_size = batch_size
        self.total_written = 0
        self.batches_written = 0
        self._pending: List[EmbeddingRecordCreate] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def add(self, record: EmbeddingRecordCreate) -> None:
        """Buffer a record, flushing when the batch is full."""
        self._pending.append(record)
        if len(self._pending) >= self.batch_size:
            await self.flush()

    async def flush(self) -> int:
        """Write all pending records as one batch.

        Returns:
            Number of records written by this flush
        """
        if not self._pending:
            return 0

        written = await self.store.bulk_insert(self._pending, self.db)
        self._pending = []
        self.total_written += written
        self.batches_written += 1
        return written

    async def __aenter__(self) -> "EmbeddingBatchWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.flush()
