"""
Directory watcher using watchdog.

Polls a directory tree and pushes events for files whose name matches the
configured pattern onto a single ordered queue.
"""

import os
import queue
import re
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

from logsentry.core import MOVED, WatchEvent
from logsentry.errors import WatcherError
from logsentry.logging_config import get_logger

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = get_logger(__name__)


def _as_str(path: str | bytes) -> str:
    return path if isinstance(path, str) else os.fsdecode(path)


class DirectoryWatcher:
    """
    Watches a directory tree for matching files.

    Config:
        root: Directory to watch
        pattern: Regex searched in each file name (not the full path)
        interval_seconds: Polling interval
        recursive: Whether to watch subdirectories
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        root: str,
        pattern: str,
        interval_seconds: float = 0.1,
        recursive: bool = True,
        events: "queue.Queue[WatchEvent] | None" = None
    ) -> None:
        self.root = root
        self.pattern = re.compile(pattern)
        self.interval_seconds = interval_seconds
        self.recursive = recursive
        self.events: queue.Queue[WatchEvent] = events if events is not None else queue.Queue()
        self.observer: BaseObserver | None = None

    def matches(self, path: str) -> bool:
        """Check whether a path's file name matches the watch pattern."""
        return self.pattern.search(os.path.basename(path)) is not None

    def discover(self) -> list[str]:
        """
        List every matching file currently under the root.

        Returns:
            Normalized paths, sorted
        """
        found: list[str] = []
        if self.recursive:
            for dirpath, _dirnames, filenames in os.walk(self.root):
                for name in filenames:
                    path = os.path.join(dirpath, name)
                    if self.matches(path):
                        found.append(os.path.normpath(path))
        else:
            with os.scandir(self.root) as entries:
                for entry in entries:
                    if entry.is_file() and self.matches(entry.path):
                        found.append(os.path.normpath(entry.path))
        return sorted(found)

    def start(self) -> None:
        """
        Start polling. Events are queued from this point on.

        Raises:
            WatcherError: If the root is not a directory or polling cannot start
        """
        if not os.path.isdir(self.root):
            raise WatcherError(f"Watch root is not a directory: {self.root}")

        self.observer = PollingObserver(timeout=self.interval_seconds)
        self.observer.schedule(
            self._create_event_handler(),
            self.root,
            recursive=self.recursive
        )
        try:
            self.observer.start()
        except OSError as e:
            raise WatcherError(f"Could not start watching {self.root}: {e}") from e

        logger.debug(
            "Polling %s every %.3fs (recursive=%s)",
            self.root, self.interval_seconds, self.recursive
        )

    def stop(self) -> None:
        """Stop polling."""
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None

    def check_health(self) -> None:
        """
        Raise if the watcher can no longer deliver events.

        Raises:
            WatcherError: If the observer thread died or the root vanished
        """
        if self.observer is None or not self.observer.is_alive():
            raise WatcherError("Directory watcher is not running")
        if not os.path.isdir(self.root):
            raise WatcherError(f"Watch root disappeared: {self.root}")

    def _create_event_handler(self) -> FileSystemEventHandler:
        """Create a watchdog event handler that feeds our queue."""
        watcher = self

        class Handler(FileSystemEventHandler):
            """Forwards file events for matching names."""

            def on_any_event(self, event: FileSystemEvent) -> None:
                if event.is_directory:
                    return

                src_path = _as_str(event.src_path)
                dest_path = None
                if event.event_type == MOVED:
                    dest_path = os.path.normpath(_as_str(event.dest_path))
                    if not (watcher.matches(src_path) or watcher.matches(dest_path)):
                        return
                elif not watcher.matches(src_path):
                    return

                watcher.events.put(WatchEvent(
                    kind=event.event_type,
                    path=os.path.normpath(src_path),
                    dest_path=dest_path
                ))

        return Handler()
