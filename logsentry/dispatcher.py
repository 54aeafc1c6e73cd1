"""
Event dispatch loop that wires the tracker, matcher, formatter and notifier.
"""

import queue
import threading
from collections.abc import Callable, Iterable

from logsentry.core import CREATED, DELETED, MODIFIED, AlertEvent, Notifier, WatchEvent
from logsentry.errors import AccessError, RenderError, StreamError
from logsentry.formatter import AlertFormatter
from logsentry.logging_config import get_logger
from logsentry.matcher import KeywordMatcher
from logsentry.tracker import OffsetTracker

logger = get_logger(__name__)


class Dispatcher:
    """
    Consumes watch events serially and turns new lines into notifications.

    This is the only code that touches the OffsetTracker, so cursors need
    no locking. Per-file and per-alert failures are logged and isolated.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        tracker: OffsetTracker,
        matcher: KeywordMatcher,
        formatter: AlertFormatter,
        notifier: Notifier,
        events: "queue.Queue[WatchEvent]",
        health_check: Callable[[], None] | None = None,
        poll_timeout: float = 0.5
    ):
        """
        Initialize the dispatcher.

        Args:
            tracker: Cursor store for watched files
            matcher: Keyword matcher for scanned lines
            formatter: Renders alerts into messages
            notifier: Delivers rendered messages
            events: Queue fed by the directory watcher
            health_check: Called while idle; raising stops the loop
            poll_timeout: Seconds to wait for an event before checking for shutdown
        """
        self.tracker = tracker
        self.matcher = matcher
        self.formatter = formatter
        self.notifier = notifier
        self.events = events
        self.health_check = health_check
        self.poll_timeout = poll_timeout
        self.alerts_sent = 0
        self.alerts_failed = 0
        # Paths that could not be opened; ignored until created or deleted again
        self.excluded: set[str] = set()
        self._stopping = threading.Event()

    def register_existing(self, paths: Iterable[str]) -> int:
        """
        Track files that were present before watching began.

        Their current content is skipped. Unreadable files are logged and
        excluded, so a later modify event cannot replay their history.

        Returns:
            Number of files now tracked
        """
        count = 0
        for path in paths:
            try:
                self.tracker.register(path, preexisting=True)
                count += 1
            except AccessError as e:
                logger.warning("Not watching %s", e)
                self.excluded.add(path)
        return count

    def handle(self, event: WatchEvent) -> None:
        """Process a single watch event to completion."""
        if event.kind == CREATED:
            # A new file at an excluded path gets a fresh chance
            self.excluded.discard(event.path)
            # A single poll may report both the creation and the first writes
            if self._register_new(event.path):
                self._scan(event.path)
        elif event.kind == MODIFIED:
            if event.path in self.excluded:
                logger.debug("Ignoring modify for excluded file %s", event.path)
                return
            # Every pre-existing file was registered at startup, so an
            # untracked path here was created after its create event was missed
            if event.path not in self.tracker and not self._register_new(event.path):
                return
            self._scan(event.path)
        elif event.kind == DELETED:
            self.excluded.discard(event.path)
            self.tracker.forget(event.path)
        else:
            logger.warning("Ignoring unrecognized event: %s", event)

    def run(self) -> None:
        """
        Process events until stop() is called.

        Raises:
            WatcherError: If the health check reports the watcher is gone
        """
        logger.debug("Dispatch loop started")
        while not self._stopping.is_set():
            try:
                event = self.events.get(timeout=self.poll_timeout)
            except queue.Empty:
                if self.health_check:
                    self.health_check()
                continue
            self.handle(event)
        logger.debug("Dispatch loop stopped")

    def stop(self) -> None:
        """Ask the loop to return once the in-flight event is finished."""
        self._stopping.set()

    def _register_new(self, path: str) -> bool:
        try:
            self.tracker.register(path, preexisting=False)
            return True
        except AccessError as e:
            logger.warning("Not watching %s", e)
            self.excluded.add(path)
            return False

    def _scan(self, path: str) -> None:
        try:
            for line in self.tracker.drain(path):
                for alert in self.matcher.alerts(line, path):
                    self._deliver(alert)
        except StreamError as e:
            logger.warning("%s - no longer watching", e)

    def _deliver(self, alert: AlertEvent) -> None:
        try:
            message = self.formatter.render(alert)
        except RenderError as e:
            logger.error(
                "Skipping alert for keyword '%s' in %s: %s", alert.keyword, alert.file, e
            )
            return

        logger.info("Alert [%s] %s: %s", alert.keyword, alert.file, alert.line.strip())

        try:
            delivered = self.notifier.notify(message)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.error(
                "Error sending notification via %s",
                self.notifier.__class__.__name__,
                exc_info=True
            )
            delivered = False

        if delivered:
            self.alerts_sent += 1
        else:
            self.alerts_failed += 1
