import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from access_gate.core.config import settings

def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """Configure application logging"""

    level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    log_file = log_file if log_file is not None else settings.LOG_FILE

    # Root logger
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # File handler (optional)
    file_handler = None
    file_error = None
    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10485760,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(level)
        except OSError as e:
            file_error = e

    # Formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler.setFormatter(formatter)
    if file_handler:
        file_handler.setFormatter(formatter)

    # Add handlers
    logger.addHandler(console_handler)
    if file_handler:
        logger.addHandler(file_handler)
    elif file_error:
        logger.warning(f"File logging disabled ({log_file}): {file_error}")

    # Silence noisy libraries
    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
