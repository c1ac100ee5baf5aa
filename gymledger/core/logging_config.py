import logging
import sys

from gymledger.core.config import settings


def setup_logging() -> None:
    """Configure the root logger with a single stdout handler at LOG_LEVEL."""
    log = logging.getLogger()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    log.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    # Uvicorn may have installed its own handlers already
    if log.hasHandlers():
        log.handlers.clear()
    log.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    log.info("Logging configured at level %s", logging.getLevelName(level))
