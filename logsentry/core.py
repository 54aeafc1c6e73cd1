"""
Core interfaces and data structures for Logsentry.

Events flow through the system as:
- WatchEvent: a filesystem change reported by the directory watcher
- AlertEvent: one keyword match on one scanned line
- Notifier: how a rendered alert leaves the process
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from logsentry.errors import DeliveryError
from logsentry.logging_config import get_logger

logger = get_logger(__name__)

CREATED = "created"
MODIFIED = "modified"
DELETED = "deleted"
MOVED = "moved"


@dataclass(frozen=True)
class WatchEvent:
    """A filesystem event for a file matching the watch pattern."""
    kind: str  # "created", "modified", "deleted", "moved"
    path: str
    dest_path: str | None = None  # Only set for "moved"


@dataclass(frozen=True)
class AlertEvent:
    """A single keyword match on a scanned line."""
    line: str  # Full line text, including the trailing newline
    file: str
    keyword: str


class Notifier(ABC):
    """
    Base class for all notifiers.

    Notifiers send rendered alert messages to external destinations.
    Subclasses implement send(); notify() wraps it with bounded retries.
    """

    def __init__(self, config: dict[str, Any]):
        """
        Initialize the notifier with configuration.

        Args:
            config: Type-specific configuration dictionary
        """
        self.config = config
        self.max_retries: int = config.get("max_retries", 0)
        self.retry_backoff: float = config.get("retry_backoff_seconds", 1.0)

    def connect(self) -> None:
        """
        Check that the channel is usable before watching starts.

        Raises:
            DeliveryError: If the channel cannot be reached
        """

    @abstractmethod
    def send(self, message: str) -> None:
        """
        Deliver a single message.

        Args:
            message: Rendered alert text

        Raises:
            DeliveryError: If the message could not be delivered
        """
        raise NotImplementedError

    def notify(self, message: str) -> bool:
        """
        Send a message, retrying with exponential backoff on failure.

        Args:
            message: Rendered alert text

        Returns:
            True if the message was delivered, False if every attempt failed
        """
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self.send(message)
                return True
            except DeliveryError as e:
                if attempt == attempts:
                    logger.error(
                        "%s gave up after %d attempt(s): %s",
                        self.__class__.__name__, attempts, e
                    )
                    return False
                delay = self.retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "%s attempt %d/%d failed: %s (retrying in %.1fs)",
                    self.__class__.__name__, attempt, attempts, e, delay
                )
                time.sleep(delay)
        return False
