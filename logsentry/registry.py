"""
Notifier registry and factory for Logsentry.

Notifier implementations register themselves by type name with the
register_notifier decorator; create_notifier() instantiates one from
configuration.
"""

from collections.abc import Callable
from typing import Any

from logsentry.core import Notifier


class NotifierRegistry:
    """Maps notifier type names to implementation classes."""

    def __init__(self) -> None:
        self._notifiers: dict[str, type[Notifier]] = {}

    def register(self, type_name: str, cls: type[Notifier]) -> None:
        """Register a notifier implementation."""
        self._notifiers[type_name] = cls

    def get(self, type_name: str) -> type[Notifier]:
        """Get a notifier class by type name."""
        if type_name not in self._notifiers:
            raise ValueError(f"Unknown notifier type: {type_name}")
        return self._notifiers[type_name]

    def names(self) -> list[str]:
        """List registered notifier type names."""
        return sorted(self._notifiers)


# Global registry instance
_registry = NotifierRegistry()


def create_notifier(type_name: str, config: dict[str, Any]) -> Notifier:
    """Create a notifier instance from configuration."""
    # Importing the package registers the built-in notifiers
    import logsentry.notifiers  # noqa: F401  pylint: disable=import-outside-toplevel,unused-import

    cls = _registry.get(type_name)
    return cls(config)


def register_notifier(type_name: str) -> Callable[[type[Notifier]], type[Notifier]]:
    """Decorator to register a notifier class."""
    def decorator(cls: type[Notifier]) -> type[Notifier]:
        _registry.register(type_name, cls)
        return cls
    return decorator


def get_registry() -> NotifierRegistry:
    """Get the global notifier registry."""
    return _registry
