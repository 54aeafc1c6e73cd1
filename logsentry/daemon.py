"""
Main daemon entry point for Logsentry.
"""

import argparse
import queue
import signal
import sys
from pathlib import Path
from typing import Any

from logsentry.config import Config, load_config
from logsentry.core import WatchEvent
from logsentry.dispatcher import Dispatcher
from logsentry.errors import LogsentryError
from logsentry.formatter import AlertFormatter
from logsentry.logging_config import get_logger, redact_secrets, setup_logging
from logsentry.matcher import KeywordMatcher
from logsentry.registry import create_notifier
from logsentry.tracker import OffsetTracker
from logsentry.watcher import DirectoryWatcher

logger = get_logger(__name__)


class LogsentryDaemon:
    """Main daemon class that owns the watcher and the dispatch loop."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize the daemon.

        Args:
            config_path: Path to configuration file
        """
        self.config: Config = load_config(config_path)
        watch = self.config.watch
        notification = self.config.notification
        redact_secrets(notification.token)

        self.notifier = create_notifier(notification.type, notification.notifier_settings())

        events: queue.Queue[WatchEvent] = queue.Queue()
        self.watcher = DirectoryWatcher(
            root=watch.root,
            pattern=watch.pattern,
            interval_seconds=watch.interval_seconds,
            recursive=watch.recursive,
            events=events
        )
        self.tracker = OffsetTracker()
        self.dispatcher = Dispatcher(
            tracker=self.tracker,
            matcher=KeywordMatcher(self.config.log.alert_keywords),
            formatter=AlertFormatter(notification.message_template),
            notifier=self.notifier,
            events=events,
            health_check=self.watcher.check_health
        )

    def start(self) -> None:
        """
        Start the daemon and block until stop() is called.

        Raises:
            DeliveryError: If the notification channel is unreachable
            WatcherError: If watching cannot start or fails while running
        """
        logger.info("Starting Logsentry daemon")

        self.notifier.connect()

        # Start polling before enumerating so files created in between
        # still arrive as create events
        self.watcher.start()
        try:
            count = self.dispatcher.register_existing(self.watcher.discover())
            logger.info(
                "Watching %d files under %s",
                count, Path(self.config.watch.root).resolve()
            )
            self.dispatcher.run()
        finally:
            self.watcher.stop()
            self.tracker.close()

        logger.info(
            "Logsentry daemon stopped (%d alert(s) sent, %d failed)",
            self.dispatcher.alerts_sent, self.dispatcher.alerts_failed
        )

    def stop(self) -> None:
        """Stop the daemon after the in-flight event is processed."""
        logger.info("Stopping Logsentry daemon")
        self.dispatcher.stop()


def run_until_signalled(daemon: LogsentryDaemon) -> None:
    """
    Run the daemon in the foreground until SIGINT or SIGTERM.

    Either signal asks the dispatch loop to finish its in-flight event and
    return. The previous handlers are restored afterwards. Must be called
    from the main thread.

    Args:
        daemon: A configured, not yet started daemon
    """
    def signal_handler(sig: int, _frame: Any) -> None:
        logger.info("Received %s, shutting down", signal.Signals(sig).name)
        daemon.stop()

    previous = {
        sig: signal.signal(sig, signal_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        daemon.start()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def main() -> None:
    """Entry point for the daemon."""
    parser = argparse.ArgumentParser(description="Logsentry log alerting daemon")
    parser.add_argument(
        '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Log level (default: INFO)'
    )
    parser.add_argument(
        '--log-file',
        help='Optional log file path (logs to console if not specified)'
    )
    args = parser.parse_args()

    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        daemon = LogsentryDaemon(args.config)
    except (FileNotFoundError, LogsentryError) as e:
        logger.critical("Cannot start: %s", e)
        sys.exit(1)

    try:
        run_until_signalled(daemon)
    except LogsentryError as e:
        logger.critical("Fatal error: %s", e)
        sys.exit(1)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.critical("Fatal error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
