import logging
import sys

LOGGING_DATETIME_FORMAT_STRING = "%Y-%m-%d %H:%M:%S"
LOGGING_LOG_FORMAT_STRING = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO"):
    """Send application logs to stdout (no-op if logging is already configured)."""
    logging.basicConfig(
        level=level,
        format=LOGGING_LOG_FORMAT_STRING,
        datefmt=LOGGING_DATETIME_FORMAT_STRING,
        stream=sys.stdout,
    )
