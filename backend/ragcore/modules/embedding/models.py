"""SQLAlchemy models for stored chunk embeddings."""

from typing import Any, Dict, List, Optional

from sqlalchemy import ARRAY, JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import CreatedAtMixin, UUIDMixin
from ...infrastructure.database.session import Base


class WidgetEmbedding(Base, UUIDMixin, CreatedAtMixin):
    """One embedded chunk owned by a widget and, optionally, a file.

    Rows are written once by bulk insert and never updated. They are removed
    together with their widget or their file.
    """

    __tablename__ = "widget_embeddings"

    widget_id: Mapped[str] = mapped_column(String(64), index=True)
    content_chunk: Mapped[str] = mapped_column(Text)
    embedding: Mapped[List[float]] = mapped_column(ARRAY(Float))
    file_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, default=None, nullable=True)
    extra_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, default=None)
