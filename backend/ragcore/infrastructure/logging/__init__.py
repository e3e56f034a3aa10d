"""Centralized logging for ragcore.

Every module obtains its logger through ``get_logger`` so that handlers,
formatters and levels are configured once, from ``LoggingSettings`` and the
current ``ENVIRONMENT``.

Usage:
    ```python
    from ragcore.infrastructure.logging import get_logger

    logger = get_logger()  # Auto-detects module name
    logger.info("Chunked page", extra={"widget_id": widget_id, "chunks": 4})
    ```

Ingestion runs can tag every record they emit with a correlation id:

    ```python
    from ragcore.infrastructure.logging import generate_correlation_id, set_correlation_id

    set_correlation_id(generate_correlation_id())
    ```
"""

from .config import (
    configure_testing_logging,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    "configure_testing_logging",
    "setup_logging_configuration",
    "set_correlation_id",
    "get_correlation_id",
    "generate_correlation_id",
]
