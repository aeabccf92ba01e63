"""
File for logging

Every tapwallet module gets its logger from get_logger. Handlers carry a filter that masks serialized extended private
keys, so an xprv/tprv that slips into a log message never reaches the console or a log file.
"""
import logging
import re
import sys
from pathlib import Path
from typing import Optional

__all__ = ["get_logger", "SecretRedactionFilter"]

DEFAULT_FORMAT = '%(asctime)s [%(name)s] [%(levelname)s]: %(message)s'
_XPRV_PATTERN = re.compile(r"\b[xt]prv[1-9A-HJ-NP-Za-km-z]{100,112}\b")


class SecretRedactionFilter(logging.Filter):
    """
    Replaces base58 extended private keys in the rendered message with a fixed marker
    """
    MARKER = "<redacted xprv>"

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if _XPRV_PATTERN.search(message):
            record.msg = _XPRV_PATTERN.sub(self.MARKER, message)
            record.args = None
        return True


def get_logger(name: str, log_level: str = "DEBUG", log_file: Optional[Path] = None,
               format_string: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with the specified configuration.

    Args:
        name: Logger name (typically __name__ from calling module)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file for persistent logging
        format_string: Optional custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent adding duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, log_level.upper()))
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    redaction = SecretRedactionFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream=sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redaction)
        logger.addHandler(handler)

    return logger
