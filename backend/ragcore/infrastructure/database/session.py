from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Declarative base for all models.

    ``MappedAsDataclass`` generates ``__init__``/``__repr__``/``__eq__`` from
    the mapped columns, so models are constructed like dataclasses:

        ```python
        record = WidgetEmbedding(widget_id="w1", content_chunk="...", embedding=[...])
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session and close it afterwards.

    Yields:
        AsyncSession: A session with ``expire_on_commit=False``.

    Example:
        ```python
        async for db in async_session():
            count = await store.count_for_widget("w1", db)
        ```
    """
    async with local_session() as db:
        yield db


async def create_tables() -> None:
    """Create all tables that don't exist yet. Existing tables are left unchanged."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
