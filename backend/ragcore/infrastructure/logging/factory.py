"""Logger factory with lazy, one-time configuration."""

import inspect
import logging
from threading import Lock
from typing import Any, MutableMapping, Optional, Tuple, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a configured logger.

    Args:
        name: Logger name. If None, the calling module's ``__name__`` is used.
        **extra_context: Context merged into every record emitted by the logger.

    Returns:
        A logger, or a ``ContextLoggerAdapter`` when extra context is given.

    Example:
        ```python
        logger = get_logger()
        logger.info("Store ready")

        logger = get_logger(component="ingestion")
        logger.info("Page ingested", extra={"page_number": 3})
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = logging.getLogger(name)

    if extra_context:
        return ContextLoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if not _logging_configured:
            setup_logging_configuration()
            _logging_configured = True

            settings = get_settings()
            logging.getLogger(__name__).info(
                f"Logging configured for {settings.ENVIRONMENT.value} environment",
                extra={
                    "log_level": settings.LOG_LEVEL,
                    "console_enabled": settings.LOG_CONSOLE_ENABLED,
                    "file_enabled": settings.LOG_FILE_ENABLED,
                },
            )


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Return ``__name__`` of the module that called ``get_logger``."""
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"

    finally:
        del frame


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Adapter that merges its fixed context with per-call ``extra``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra") or {}
        adapter_extra = self.extra if isinstance(self.extra, dict) else {}
        kwargs["extra"] = {**adapter_extra, **extra}
        return msg, kwargs
