"""
Structured Logging Framework
=============================

Provides structured logging for the tagging engine with:
- Structured logging (JSON format)
- Request correlation IDs
- Performance metrics
- Error tracking
"""

import logging
import logging.handlers
import json
import time
import os
from typing import Optional
from functools import wraps
from datetime import datetime, timezone
import sys


class StructuredFormatter(logging.Formatter):
    """Format logs as structured JSON for better parsing"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add extra fields if present (using getattr for type safety)
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            log_data["duration_ms"] = round(duration_ms, 3)

        service = getattr(record, "service", None)
        if service is not None:
            log_data["service"] = service

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _level_from_env(default: int) -> int:
    raw = os.getenv("LOG_LEVEL")
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    use_structured: bool = True,
) -> logging.Logger:
    """
    Set up a logger with console and optional file handlers

    Args:
        name: Logger name
        level: Logging level, overridden by LOG_LEVEL
        log_file: Optional file path for logging, defaults to LOG_FILE
        use_structured: Whether to use structured JSON format

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = _level_from_env(level)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if use_structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10485760, backupCount=5  # 10MB per file
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_performance(func):
    """Decorator to log function execution time"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.debug(
                f"{func.__qualname__} completed successfully",
                extra={"duration_ms": duration_ms},
            )
            return result
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            # Exceptions may carry their own level; rejected caller input is a warning
            level = getattr(e, "log_level", logging.ERROR)
            logger.log(
                level,
                f"{func.__qualname__} failed: {e}",
                extra={"duration_ms": duration_ms},
            )
            raise

    return wrapper


class Logger:
    """Convenience wrapper for logger instances"""

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = setup_logger(name, level)
        self.name = name

    def info(self, message: str, **kwargs):
        self.logger.info(message, extra=kwargs)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, extra=kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self.logger.error(message, extra=kwargs, exc_info=exc_info)

    def critical(self, message: str, **kwargs):
        self.logger.critical(message, extra=kwargs)

    def performance(self, duration_ms: float, operation: str, **kwargs):
        """Log performance metric"""
        self.logger.info(
            f"Performance: {operation}",
            extra={"duration_ms": duration_ms, **kwargs},
        )
