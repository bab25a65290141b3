import logging
import os
from datetime import datetime
from typing import Optional

from showfinder.config import get_settings

def setup_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with detailed formatting.

    Args:
        name: Logger name (usually __name__, None for the root logger)
        level: Optional logging level override

    Returns:
        Configured logger instance
    """
    settings = get_settings()
    logger = logging.getLogger(name)

    # Set level from argument, environment or settings
    log_level = (
        level or
        os.getenv('LOG_LEVEL', settings.LOG_LEVEL)
    ).upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    formatter = logging.Formatter(
        fmt=settings.LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Add handlers if they haven't been added already
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        log_dir = settings.LOG_DIR
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(
                    log_dir,
                    f"{datetime.now().strftime('%Y-%m-%d')}.log"
                )
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
