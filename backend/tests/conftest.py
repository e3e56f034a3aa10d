"""Test configuration and fixtures for ragcore."""

import os
from typing import Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# mypy: disable-error-code="import-untyped"
from testcontainers.postgres import PostgresContainer
from testcontainers.core.docker_client import DockerClient

# Set test environment variables
os.environ["ENVIRONMENT"] = "testing"
os.environ["OPENAI_API_KEY"] = "test-key"

from ragcore.infrastructure.database.session import Base  # noqa: E402
from ragcore.infrastructure.embedding import EmbeddingGenerator  # noqa: E402
from ragcore.infrastructure.logging import configure_testing_logging  # noqa: E402
from ragcore.modules.embedding.models import WidgetEmbedding  # noqa: E402, F401
from ragcore.modules.embedding.schemas import EmbeddingRecordCreate, StoredVector  # noqa: E402
from ragcore.modules.embedding.services import EmbeddingStoreService  # noqa: E402

configure_testing_logging()


class FakeEmbeddingProvider:
    """Deterministic in-memory provider.

    Texts registered in ``vectors`` get that vector; anything else gets a
    vector derived from its length. ``fail_after`` makes every call after the
    first N raise.
    """

    def __init__(self, dimension: int = 3, fail_after: Optional[int] = None):
        self.model_name = "fake-embedding"
        self._dimension = dimension
        self.vectors: Dict[str, List[float]] = {}
        self.calls: List[str] = []
        self.error: Optional[Exception] = None
        self.fail_after = fail_after

    @property
    def embedding_dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if self.fail_after is not None and len(self.calls) > self.fail_after:
            raise ConnectionError("provider unavailable")
        if text in self.vectors:
            return list(self.vectors[text])
        return [float(len(text) % 7 + 1)] + [1.0] * (self._dimension - 1)


class InMemoryEmbeddingStore(EmbeddingStoreService):
    """Store keeping records in a list; the session argument is ignored."""

    def __init__(self):
        self.records: List[EmbeddingRecordCreate] = []
        self.batches: List[int] = []
        self.write_error: Optional[Exception] = None
        self.count_error: Optional[Exception] = None

    async def bulk_insert(self, records: Sequence[EmbeddingRecordCreate], db) -> int:
        if not records:
            return 0
        if self.write_error is not None:
            raise self.write_error
        self.records.extend(records)
        self.batches.append(len(records))
        return len(records)

    async def delete_for_widget(self, widget_id: str, db) -> int:
        before = len(self.records)
        self.records = [r for r in self.records if r.widget_id != widget_id]
        return before - len(self.records)

    async def delete_for_file(self, widget_id: str, file_id: str, db) -> int:
        before = len(self.records)
        self.records = [r for r in self.records if not (r.widget_id == widget_id and r.file_id == file_id)]
        return before - len(self.records)

    async def count_for_widget(self, widget_id: str, db) -> int:
        if self.count_error is not None:
            raise self.count_error
        return sum(1 for r in self.records if r.widget_id == widget_id)

    async def fetch_vectors(self, db, widget_id: Optional[str] = None) -> List[StoredVector]:
        return [
            StoredVector(
                widget_id=r.widget_id,
                content_chunk=r.content_chunk,
                embedding=r.embedding,
                metadata=r.metadata.to_storage(),
            )
            for r in self.records
            if widget_id is None or r.widget_id == widget_id
        ]


@pytest.fixture
def fake_provider():
    """Three-dimensional fake embedding provider."""
    return FakeEmbeddingProvider()


@pytest.fixture
def generator(fake_provider):
    """Embedding generator over the fake provider."""
    return EmbeddingGenerator(fake_provider, max_tokens=8000, chars_per_token=3.5)


@pytest.fixture
def memory_store():
    """Empty in-memory embedding store."""
    return InMemoryEmbeddingStore()


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        DockerClient()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def pg_container():
    """Create a PostgreSQL container for testing."""
    if not is_docker_running():
        pytest.skip("Docker is required, but not running")

    with PostgresContainer("postgres:16-alpine") as pg:
        yield pg


@pytest_asyncio.fixture(scope="function")
async def test_db_url(pg_container):
    """Create a proper asyncpg URL for PostgreSQL."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)

    user = getattr(pg_container, "username", "test")
    password = getattr(pg_container, "password", "test")
    db = getattr(pg_container, "dbname", "test")

    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"


@pytest_asyncio.fixture(scope="function")
async def test_db_engine(test_db_url):
    """Create a SQLAlchemy engine with the embeddings table."""
    engine = create_async_engine(test_db_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
