"""Logging configuration and setup."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(config: Optional[Dict] = None) -> logging.Logger:
    """Initialize logging with file and console handlers.

    The library itself never calls this; applications opt in.

    Args:
        config: Configuration dictionary with an optional 'logging' section

    Returns:
        Configured root logger
    """
    log_config = (config or {}).get('logging', {}) or {}
    level_name = str(log_config.get('level', 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_file = log_config.get('file', 'logs/boorukit.log')

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger()
    logger.setLevel(log_level)
    logger.handlers.clear()

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=log_config.get('max_bytes', 10485760),  # 10MB
            backupCount=log_config.get('backup_count', 5),
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)

    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(max(log_level, logging.WARNING))

    logger.info(f"boorukit logging initialized (level={level_name}, file={log_file or 'none'})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger for specific module.

    Args:
        name: Module name (usually __name__)
    """
    return logging.getLogger(name)
