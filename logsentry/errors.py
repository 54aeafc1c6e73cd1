"""
Exception hierarchy for Logsentry.

Startup errors (config, notifier connection, watcher start) are fatal.
Per-file and per-alert errors are logged and isolated by the dispatcher.
"""


class LogsentryError(Exception):
    """Base class for all Logsentry errors."""


class ConfigError(LogsentryError, ValueError):
    """Configuration is malformed or incomplete."""


class AccessError(LogsentryError):
    """A matched file could not be opened for reading."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot open {path}: {reason}")
        self.path = path


class StreamError(LogsentryError):
    """Reading a tracked file failed mid-drain (removed or truncated)."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


class RenderError(LogsentryError):
    """The message template could not be rendered for an alert."""


class DeliveryError(LogsentryError):
    """The notification channel rejected or failed to send a message."""


class WatcherError(LogsentryError):
    """The directory watcher could not start or stopped unexpectedly."""
