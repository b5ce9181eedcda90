"""
Centralized logging configuration for the application.

Everything goes to the console and logs/app.log. Holiday synchronization
(provider calls, retries, fallbacks) is also written to logs/holiday_sync.log
so a sync run can be followed without the request noise.
"""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_DIR = Path(os.getenv("LOG_DIR", Path(__file__).resolve().parent.parent.parent / "logs"))
LOG_FILE = LOG_DIR / "app.log"
SYNC_LOG_FILE = LOG_DIR / "holiday_sync.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5

FORMAT_CONSOLE = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
FORMAT_FILE = "%(asctime)s | %(levelname)-7s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Loggers whose records also land in holiday_sync.log
SYNC_LOGGERS = (
    "calendar_backend.services.holiday_sync",
    "calendar_backend.services.public_data_client",
    "calendar_backend.services.holiday_parser",
    "calendar_backend.services.scheduler",
)

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore", "apscheduler.executors.default")


def _file_handler(path: Path, level: int):
    """Rotating UTF-8 file handler, or None when the file cannot be created."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    except OSError:
        logging.getLogger(__name__).warning("Could not create log file %s; file logging disabled", path)
        return None
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FORMAT_FILE, datefmt=DATE_FMT))
    return handler


def attach_sync_log(path: Path = SYNC_LOG_FILE, level: int = logging.INFO) -> None:
    """Share one holiday_sync.log handler between the sync loggers (once per path)."""
    target = os.path.abspath(path)
    loggers = [
        logging.getLogger(name) for name in SYNC_LOGGERS
        if not any(getattr(h, "baseFilename", None) == target for h in logging.getLogger(name).handlers)
    ]
    if not loggers:
        return
    handler = _file_handler(path, level)
    if handler is None:
        return
    for logger in loggers:
        logger.addHandler(handler)


def setup_logging(level: str = "INFO", log_file: Path = LOG_FILE, sync_log_file: Path = SYNC_LOG_FILE) -> None:
    """Configure root logger with console and rotating file handlers."""
    level_value = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level_value)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Avoid duplicate handlers when reloading
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(FORMAT_CONSOLE, datefmt=DATE_FMT))
    root.addHandler(console)

    file_handler = _file_handler(log_file, level_value)
    if file_handler is not None:
        root.addHandler(file_handler)

    attach_sync_log(sync_log_file, level_value)
