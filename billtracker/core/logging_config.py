import logging
import sys

from billtracker.core.config import settings


def setup_logging():
    """
    Configures the logging for the application.
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger = logging.getLogger()
    logger.setLevel(settings.LOG_LEVEL.upper())

    # Avoid adding handlers multiple times if this function is called more than once
    if not logger.handlers:
        logger.addHandler(stream_handler)

    logging.getLogger(__name__).info("Logging configured.")
