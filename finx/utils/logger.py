"""
Logging configuration for FinX
Colored console output on stderr, structured fields passed through `extra`
"""

import functools
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional
import colorama
from colorama import Fore, Style

# Initialize colorama for Windows support
colorama.init()

LOG_COLORS = {
    'DEBUG': Fore.CYAN,
    'INFO': Fore.GREEN,
    'WARNING': Fore.YELLOW,
    'ERROR': Fore.RED,
    'CRITICAL': Fore.MAGENTA
}

CONSOLE_FORMAT = "%(timestamp)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

class ColoredFormatter(logging.Formatter):
    """Console formatter with per-level colors"""

    def __init__(self, fmt=None, datefmt=None, use_colors=True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record):
        # Work on a copy so file handlers never see escape codes
        record = logging.makeLogRecord(record.__dict__)
        if self.use_colors and record.levelname in LOG_COLORS:
            record.levelname = f"{LOG_COLORS[record.levelname]}{record.levelname}{Style.RESET_ALL}"
            record.name = f"{Fore.BLUE}{record.name}{Style.RESET_ALL}"

        record.timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        return super().format(record)

class StructuredLogger:
    """Thin wrapper whose `extra` fields (duration_ms, ...) land on the record"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level, msg, *args, **kwargs):
        kwargs['extra'] = dict(kwargs.get('extra') or {})
        getattr(self.logger, level)(msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):
        self._log('debug', msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._log('info', msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._log('warning', msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._log('error', msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self._log('critical', msg, *args, **kwargs)

_loggers: Dict[str, StructuredLogger] = {}

def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_colors: bool = True
) -> StructuredLogger:
    """
    Set up a logger with console and optional file output

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        use_colors: Whether to use colored output

    Returns:
        StructuredLogger instance
    """
    from ..config.settings import get_config

    if level is None:
        level = get_config().system.log_level

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Replace handlers so repeated setup never duplicates output
    logger.handlers = []

    # stdout is reserved for command output, logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=use_colors))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False

    structured = StructuredLogger(logger)
    _loggers[name] = structured
    return structured

def get_logger(name: str) -> StructuredLogger:
    """
    Get or create a logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    if name in _loggers:
        return _loggers[name]
    return setup_logger(name)

def log_async_performance(logger: Optional[StructuredLogger] = None):
    """Decorator to log duration of an async operation"""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            nonlocal logger
            if logger is None:
                logger = get_logger(func.__module__)

            start_time = time.time()
            logger.debug(f"Starting async {func.__name__}")

            try:
                result = await func(*args, **kwargs)
                elapsed = time.time() - start_time
                logger.info(
                    f"Completed async {func.__name__}",
                    extra={'duration_ms': int(elapsed * 1000)}
                )
                return result
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"Failed async {func.__name__}: {str(e)}",
                    extra={'duration_ms': int(elapsed * 1000)}
                )
                raise

        return wrapper
    return decorator
