import sys
import logging
from typing import Any

from loguru import logger


def feed_context_filter(record: dict[str, Any]) -> bool:
    """Ensures every record carries a ``feed`` extra for the log format."""
    extra = record.get("extra")
    if not isinstance(extra, dict):
        record["extra"] = extra = {}
    feed = extra.get("feed")
    if feed is None:
        extra["feed"] = "-"
    elif hasattr(feed, "value"):
        # SourceFeed enums are logged by value
        extra["feed"] = feed.value
    return True  # Keep the record


def setup_logging(level: str = "INFO") -> None:
    """Configures Loguru logger for the engine and its command-line shell."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,  # Output to standard error
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>{extra[feed]: <7}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,  # Better tracebacks
        diagnose=True,  # More detailed error info
        filter=feed_context_filter,
    )

    logger.info(f"Logging initialized with level: {level.upper()}")

    # Intercept standard logging messages
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding Loguru level if it exists
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.info("Standard logging intercepted.")
