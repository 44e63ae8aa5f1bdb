"""
Logging configuration for the KidLedger backend.

structlog on top of the standard logging module. Records are rendered as
JSON to stdout and, optionally, to a log file rotated every Monday (UTC)
with 52 gzip-compressed backups.
"""
import gzip
import logging
import logging.handlers
import shutil
import sys
from pathlib import Path

import structlog

LOG_FILE_NAME = "kidledger.log"


def get_log_directory() -> Path:
    """Get or create the log directory."""
    log_dir = Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _compress_rotated_file(source: str, dest: str) -> None:
    """Gzip a rotated log file into ``dest`` and remove the original."""
    with open(source, 'rb') as f_in:
        with gzip.open(dest, 'wb') as f_out:
            shutil.copyfileobj(f_in, f_out)

    Path(source).unlink()


def _build_file_handler() -> logging.Handler:
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(get_log_directory() / LOG_FILE_NAME),
        when="W0",
        backupCount=52,
        encoding="utf-8",
        utc=True,
        )
    file_handler.rotator = _compress_rotated_file
    file_handler.namer = lambda name: name + ".gz"
    return file_handler


def configure_logging(log_level: str = "INFO", enable_file_logging: bool = True) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_file_logging: Whether to also write to the rotating log file
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if enable_file_logging:
        handlers.append(_build_file_handler())

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
            ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("Transaction posted", account_id=account.id, amount="12.50")
    """
    return structlog.get_logger(name)
