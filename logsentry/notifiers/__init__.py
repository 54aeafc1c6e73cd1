"""
Logsentry Notifiers Submodule.

Automatically discovers and imports all notifier modules with validation.
"""

import importlib
import inspect
import pkgutil

from logsentry.core import Notifier as BaseNotifier
from logsentry.logging_config import get_logger

logger = get_logger(__name__)

__all__ = []
_seen_names = set()

for module_info in pkgutil.iter_modules(__path__):
    module = importlib.import_module(f"{__name__}.{module_info.name}")

    for name in getattr(module, '__all__', []):
        if name in _seen_names:
            logger.warning(
                "Duplicate notifier name '%s' in module '%s' - skipping",
                name,
                module_info.name
            )
            continue

        cls = getattr(module, name)

        if not inspect.isclass(cls) or not issubclass(cls, BaseNotifier):
            logger.warning(
                "Export '%s' in module '%s' is not a Notifier subclass - skipping",
                name,
                module_info.name
            )
            continue

        globals()[name] = cls
        __all__.append(name)
        _seen_names.add(name)
