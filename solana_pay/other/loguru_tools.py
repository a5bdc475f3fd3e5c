import sys
from typing import Optional

from loguru import logger

from solana_pay.other.config_reader import config

_log_format = "{time:YYYY-MM-DD HH:mm:ss} - [{level}] - {name}.{function}({line}) - {message}"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Send log records to stderr and, if given, to a rotating file."""
    level = (level or config.log_level).upper()
    log_file = log_file or config.log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=_log_format)
    if log_file:
        logger.add(log_file, level=level, format=_log_format, rotation="1 MB")
