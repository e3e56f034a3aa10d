"""Script to create the embedding tables from SQLAlchemy models."""

import asyncio
import sys

from ragcore.infrastructure.database.session import create_tables
from ragcore.infrastructure.logging import get_logger
from ragcore.modules.embedding.models import WidgetEmbedding

logger = get_logger("ragcore.scripts.create_tables")


async def main() -> None:
    """Create database tables."""
    logger.info(f"Creating database tables ({WidgetEmbedding.__tablename__})...")

    try:
        await create_tables()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
