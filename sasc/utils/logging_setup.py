"""Centralized logging configuration for SASC."""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = 'sasc'


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, 'extra_fields'):
            log_obj.update(record.extra_fields)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        for key in ['duration', 'operation', 'phase']:
            if hasattr(record, key):
                log_obj[key] = getattr(record, key)

        return json.dumps(log_obj, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format with colors for console output."""
        if not sys.stderr.isatty():
            return super().format(record)

        # Work on a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    name: str = PACKAGE_LOGGER,
    level: str = 'WARNING',
    log_dir: Optional[Path] = None,
    console: bool = True,
    file: bool = False,
    json_format: bool = True,
) -> logging.Logger:
    """
    Setup centralized logging configuration.

    Module loggers obtained through get_logger() are children of the
    package logger and propagate to the handlers installed here.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: logs/)
        console: Enable console output
        file: Enable file output
        json_format: Use JSON format for file logs

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper()))

        if sys.stderr.isatty():
            console_formatter = ConsoleFormatter(
                '%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        else:
            console_formatter = logging.Formatter(
                '%(asctime)s - %(levelname)s - [%(module)s] - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if file:
        if log_dir is None:
            log_dir = Path.cwd() / 'logs'
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        date_str = datetime.now().strftime('%Y%m%d')
        suffix = 'jsonl' if json_format else 'log'
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f'sasc_{date_str}.{suffix}',
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S'
                )
            )

        file_handler.setLevel(logging.DEBUG)  # Capture all levels in file
        logger.addHandler(file_handler)
        # The file gets everything even when the console is quieter
        logger.setLevel(logging.DEBUG)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger below the package logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + '.'):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def log_operation(logger: logging.Logger, operation: str, **context):
    """
    Log an operation with context.

    Args:
        logger: Logger instance
        operation: Operation name
        **context: Additional context to log
    """
    logger.info(f"Starting operation: {operation}", extra={'operation': operation, 'extra_fields': context})


def log_phase(logger: logging.Logger, phase: str, duration: float, **context):
    """Log the completion of one analysis phase with its duration."""
    logger.info(
        f"Phase {phase} finished in {duration:.3f}s",
        extra={'phase': phase, 'duration': duration, 'extra_fields': context}
    )
