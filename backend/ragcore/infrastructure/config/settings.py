import logging
import os
from enum import Enum

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), env_paths[0])
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"
    TESTING = "testing"


class EmbeddingProviderOption(str, Enum):
    """Embedding backends. One is used system-wide so all stored vectors share a model."""

    OPENAI = "openai"
    LOCAL = "local"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class DatabaseSettings(BaseSettings):
    """Database-related settings."""

    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", default=5432, cast=int)
    POSTGRES_DB: str = config("POSTGRES_DB", default="postgres")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")

    POSTGRES_POOL_SIZE: int = config("POSTGRES_POOL_SIZE", default=20, cast=int)
    POSTGRES_MAX_OVERFLOW: int = config("POSTGRES_MAX_OVERFLOW", default=0, cast=int)

    @property
    def DATABASE_URL(self) -> str:
        """Get the full database URL."""
        return (
            f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


class EmbeddingSettings(BaseSettings):
    """Embedding provider settings."""

    EMBEDDING_PROVIDER: EmbeddingProviderOption = config(
        "EMBEDDING_PROVIDER", default=EmbeddingProviderOption.OPENAI, cast=EmbeddingProviderOption
    )
    OPENAI_API_KEY: str = config("OPENAI_API_KEY", default="")
    OPENAI_BASE_URL: str = config("OPENAI_BASE_URL", default="https://api.openai.com/v1")
    EMBEDDING_MODEL: str = config("EMBEDDING_MODEL", default="text-embedding-3-small")
    LOCAL_EMBEDDING_MODEL: str = config("LOCAL_EMBEDDING_MODEL", default="all-mpnet-base-v2")
    EMBEDDING_DIMENSION: int = config("EMBEDDING_DIMENSION", default=1536, cast=int)
    EMBEDDING_TIMEOUT_SECONDS: float = config("EMBEDDING_TIMEOUT_SECONDS", default=30.0, cast=float)


class ChunkingSettings(BaseSettings):
    """Chunking and token budget settings."""

    CHUNK_DEFAULT_WORDS: int = config("CHUNK_DEFAULT_WORDS", default=1000, cast=int)
    CHUNK_OVERLAP_WORDS: int = config("CHUNK_OVERLAP_WORDS", default=100, cast=int)
    # text-embedding-3-small accepts 8191 tokens
    CHUNK_MAX_TOKENS: int = config("CHUNK_MAX_TOKENS", default=8000, cast=int)
    CHUNK_CHARS_PER_TOKEN: float = config("CHUNK_CHARS_PER_TOKEN", default=3.5, cast=float)
    CHUNK_LONG_WORD_THRESHOLD: float = config("CHUNK_LONG_WORD_THRESHOLD", default=20.0, cast=float)
    CHUNK_SMALL_RANGE_WORDS: int = config("CHUNK_SMALL_RANGE_WORDS", default=100, cast=int)
    CHUNK_CHAR_SAFETY_MARGIN: float = config("CHUNK_CHAR_SAFETY_MARGIN", default=0.9, cast=float)
    CHUNK_CHAR_OVERLAP_RATIO: float = config("CHUNK_CHAR_OVERLAP_RATIO", default=0.1, cast=float)
    CHUNK_MIN_CHAR_PROGRESS: int = config("CHUNK_MIN_CHAR_PROGRESS", default=100, cast=int)

    EMBEDDING_BATCH_SIZE: int = config("EMBEDDING_BATCH_SIZE", default=10, cast=int)


class SearchSettings(BaseSettings):
    """Similarity search defaults."""

    SEARCH_DEFAULT_LIMIT: int = config("SEARCH_DEFAULT_LIMIT", default=10, cast=int)
    SEARCH_DEFAULT_THRESHOLD: float = config("SEARCH_DEFAULT_THRESHOLD", default=0.0, cast=float)


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FORMAT: str = config("LOG_FORMAT", default="structured")  # "detailed", "structured", "json"

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/ragcore.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)

    LOG_DEVELOPMENT_VERBOSE: bool = config("LOG_DEVELOPMENT_VERBOSE", default=True, cast=bool)
    LOG_PRODUCTION_OPTIMIZE: bool = config("LOG_PRODUCTION_OPTIMIZE", default=True, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


class Settings(
    EnvironmentSettings,
    DatabaseSettings,
    EmbeddingSettings,
    ChunkingSettings,
    SearchSettings,
    LoggingSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings
