import logging
import sys

from clinic_scheduler.core.config import settings

LOGGER_NAME = "clinic_scheduler"

def setup_logging(level: str = settings.LOG_LEVEL):
    """
    Configure the scheduler logger. Safe to call more than once: the
    stdout handler is attached only the first time, the level is reapplied.
    """
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logger.setLevel(numeric_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s [branch=%(branch)s] - %(message)s",
            defaults={"branch": "-"},
        ))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    return logger

logger = setup_logging()
