"""
Centralized logging configuration for Logsentry.

Every module logs through a child of the "logsentry" logger so a single
call to setup_logging() controls the daemon, the CLI and the notifiers.
Secrets such as the bot token can be masked on every handler with
redact_secrets().
"""

import logging
import logging.handlers
import sys
from typing import TextIO

ROOT_LOGGER = "logsentry"

# Libraries that are chatty at DEBUG and INFO; urllib3 logs request URLs,
# which carry the bot token
NOISY_LOGGERS = ("watchdog", "urllib3")

REDACTED = "<redacted>"


class SecretFilter(logging.Filter):
    """Replaces known secret strings in formatted log messages."""

    def __init__(self, secrets: list[str]) -> None:
        super().__init__()
        self.secrets = [secret for secret in secrets if secret]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB default
    backup_count: int = 5,
    stream: TextIO | None = None
) -> None:
    """
    Configure logging for Logsentry.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file, in addition to the console
        max_bytes: Maximum bytes per log file before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)
        stream: Console stream (default: stdout; the CLI passes stderr)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # The watcher polls on its own thread while the dispatcher runs on the main one
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handlers: list[logging.Handler] = [
        logging.StreamHandler(stream if stream is not None else sys.stdout)
    ]
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        ))

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(log_level)
    for old in root_logger.handlers:
        old.close()
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def redact_secrets(*secrets: str) -> None:
    """
    Mask the given strings in everything the Logsentry handlers emit.

    Applies to handlers installed by setup_logging(); call it once the
    configuration (and therefore the secrets) is known.
    """
    secret_filter = SecretFilter(list(secrets))
    if not secret_filter.secrets:
        return
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.addFilter(secret_filter)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    prefix = f"{ROOT_LOGGER}."
    if name.startswith(prefix):
        name = name[len(prefix):]

    return logging.getLogger(f"{prefix}{name}")
