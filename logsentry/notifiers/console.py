"""
Console notifier for Logsentry.
"""

from logsentry.core import Notifier
from logsentry.logging_config import get_logger
from logsentry.registry import register_notifier

logger = get_logger(__name__)


@register_notifier("console")
class ConsoleNotifier(Notifier):
    """
    Prints alert messages to stdout.

    Useful for dry runs and debugging.

    Config:
        (none required)
    """

    def send(self, message: str) -> None:
        """Print the message."""
        logger.debug("Console alert: %s", message)
        print(message, flush=True)


# Export for dynamic importing
__all__ = ["ConsoleNotifier"]
