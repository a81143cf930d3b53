"""
Logging Setup
Configures loguru sinks for the deployment tool
"""

import os
import sys
from typing import Optional
from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def is_valid_level(level: str) -> bool:
    """True if loguru knows the level name"""
    try:
        logger.level(level)
    except (ValueError, TypeError):
        return False
    return True


def bootstrap_level(value: Optional[str]) -> str:
    """Level to log with before configuration is validated; unknown names fall back to INFO"""
    level = (value or 'INFO').strip().upper()
    return level if is_valid_level(level) else 'INFO'


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Route all log output to stderr (stdout carries only the result line)

    Args:
        level: Console log level
        log_file: Optional rotating log file (always DEBUG)
    """
    logger.remove()

    # diagnose=False keeps local variables (private keys) out of tracebacks
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        backtrace=False,
        diagnose=False
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format=FILE_FORMAT,
            level="DEBUG",
            backtrace=False,
            diagnose=False
        )
