"""
Logging setup — console plus ``LOG_DIR/server.log``.
"""
import logging
import os

from order_splitter.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """Configure the package logger once per process and return it."""
    logger = logging.getLogger("order_splitter")
    logger.setLevel(settings.LOG_LEVEL.upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "server.log"), encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
