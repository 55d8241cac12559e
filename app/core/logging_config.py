"""
Logging configuration for the inrooms API.

Console logging always; a rotating file under LOG_DIR when one is set.
`sanitize_log_data` strips secrets from payloads before they are logged.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

LOG_FILE_NAME = "inrooms.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Chatty dependencies; raised above the app level
LIBRARY_LOG_LEVELS = {
    "uvicorn": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "stripe": logging.WARNING,
    "googleapiclient": logging.WARNING,
    "googleapiclient.discovery_cache": logging.ERROR,
    "google.auth": logging.WARNING,
}

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = (
    "password", "token", "secret", "key", "api_key",
    "stripe_secret_key", "stripe_webhook_secret",
    "google_private_key", "access_code", "database_url",
)


def build_formatter(detailed: bool = False) -> logging.Formatter:
    """Console lines stay short; file lines carry the call site."""
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if detailed:
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    return logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")


def _file_handler(log_dir: str, level: int) -> RotatingFileHandler:
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
    )
    handler.setLevel(level)
    handler.setFormatter(build_formatter(detailed=True))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_dir: Directory for the rotating log file, or empty for console only

    Returns:
        The configured root logger
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(build_formatter())
    root.addHandler(console)

    if log_dir:
        root.addHandler(_file_handler(log_dir, level))

    for name, library_level in LIBRARY_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(max(level, library_level))

    return root


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(sensitive in lowered for sensitive in SENSITIVE_KEYS)


def sanitize_log_data(data: Any) -> Any:
    """
    Return a copy of `data` with secret-looking keys redacted.

    Nested dicts and lists are walked; non-container values pass through.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if _is_sensitive(key) else sanitize_log_data(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize_log_data(item) for item in data]
    return data
