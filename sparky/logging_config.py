"""Logging setup for nightly analysis runs.

Every module logs under the 'sparky' namespace ('sparky.store',
'sparky.narratives', ...). Runs for one date share a log file, so a
re-run appends to the night's log instead of scattering new files.
"""

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'sparky'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
SIMPLE_FORMAT = '%(levelname)s: %(message)s'

# HTTP libraries log every archive request at DEBUG
NOISY_LOGGERS = ('urllib3', 'requests')


def log_path(log_dir: Path, run_date: Optional[date] = None) -> Path:
    """Log file for a run: nightly_YYYY-MM-DD.log, or a timestamp without a date."""
    stamp = run_date.isoformat() if run_date else datetime.now().strftime('%Y%m%d_%H%M%S')
    return log_dir / f'nightly_{stamp}.log'


def setup_logging(
    run_date: Optional[date] = None,
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the 'sparky' logger for a run.

    Args:
        run_date: Date being analysed (names the log file)
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to log to file (default: True)
        log_to_console: Whether to log to console (default: True)

    Returns:
        Configured logger instance

    Example:
        from sparky.logging_config import setup_logging
        logger = setup_logging(date(2026, 1, 25))
        logger.info("Starting nightly analysis")
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path(log_dir, run_date), mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(module: Optional[str] = None) -> logging.Logger:
    """Get the package logger, or a child such as get_logger('cli') -> 'sparky.cli'."""
    return logging.getLogger(f'{LOGGER_NAME}.{module}' if module else LOGGER_NAME)
