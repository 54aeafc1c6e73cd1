"""
Logsentry CLI - Command line interface for the Logsentry daemon.

Provides commands for:
- Configuration validation
- Daemon management (start)
- One-off scans of a log file (dry run)
- Manual notifications
"""

import argparse
import sys
from pathlib import Path

from logsentry.config import load_config
from logsentry.daemon import LogsentryDaemon, run_until_signalled
from logsentry.errors import LogsentryError, RenderError
from logsentry.formatter import AlertFormatter
from logsentry.logging_config import get_logger, setup_logging
from logsentry.matcher import KeywordMatcher
from logsentry.registry import create_notifier
from logsentry.tracker import OffsetTracker

logger = get_logger(__name__)


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Validate configuration file."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
    except LogsentryError as e:
        print(f"✗ Configuration invalid: {e}", file=sys.stderr)
        return 1

    print(f"✓ Configuration valid: {config_path}")
    print(f"  - {len(config.log.alert_keywords)} alert keyword(s): "
          f"{', '.join(config.log.alert_keywords)}")
    print(f"  - Notifier: {config.notification.type}")
    print(f"  - Watching: {config.watch.root} (pattern {config.watch.pattern!r}, "
          f"every {config.watch.interval_seconds}s)")
    return 0


def cmd_daemon_start(args: argparse.Namespace) -> int:
    """Start the Logsentry daemon in the foreground."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        print(f"Starting Logsentry daemon with config: {config_path}")
        daemon = LogsentryDaemon(config_path)
        run_until_signalled(daemon)
        return 0
    except (LogsentryError, FileNotFoundError) as e:
        print(f"Error running daemon: {e}", file=sys.stderr)
        return 1


def cmd_scan(args: argparse.Namespace) -> int:
    """Scan a log file once and print the alerts it would raise."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
        matcher = KeywordMatcher(config.log.alert_keywords)
        formatter = AlertFormatter(config.notification.message_template)

        tracker = OffsetTracker()
        tracker.register(args.file, preexisting=False)

        alert_count = 0
        try:
            for line in tracker.drain(args.file):
                for alert in matcher.alerts(line, args.file):
                    try:
                        print(formatter.render(alert))
                    except RenderError as e:
                        print(f"✗ {e}", file=sys.stderr)
                        continue
                    alert_count += 1
        finally:
            tracker.close()
    except LogsentryError as e:
        print(f"Error scanning {args.file}: {e}", file=sys.stderr)
        return 1

    print(f"\n{alert_count} alert(s) in {args.file}", file=sys.stderr)
    return 0


def cmd_notify(args: argparse.Namespace) -> int:
    """Send a manual notification."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
        notifier = create_notifier(
            config.notification.type,
            config.notification.notifier_settings()
        )
    except LogsentryError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    print(f"Sending notification via {config.notification.type}: {args.message}")
    if notifier.notify(args.message):
        print("✓ Sent")
        return 0
    print("✗ Not sent (see log for details)", file=sys.stderr)
    return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="logsentry",
        description="Logsentry - Keyword alerts for growing log files"
    )
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)"
    )
    parser.add_argument(
        "--log-file",
        help="Optional log file path (logs to stderr if not specified)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="subcommand")
    config_subparsers.add_parser("validate", help="Validate configuration file")

    # Daemon commands
    daemon_parser = subparsers.add_parser("daemon", help="Daemon management")
    daemon_subparsers = daemon_parser.add_subparsers(dest="subcommand")
    daemon_subparsers.add_parser("start", help="Start daemon (foreground)")

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan", help="Scan a log file from the start and print alerts (no delivery)"
    )
    scan_parser.add_argument("file", help="Log file to scan")

    # Notify command
    notify_parser = subparsers.add_parser("notify", help="Send manual notification")
    notify_parser.add_argument("message", help="Notification message")

    args = parser.parse_args()

    # Keep stdout for command output such as scan results
    setup_logging(level=args.log_level, log_file=args.log_file, stream=sys.stderr)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "config":
        if args.subcommand == "validate":
            return cmd_config_validate(args)
        parser.print_help()
        return 0

    if args.command == "daemon":
        if args.subcommand == "start":
            return cmd_daemon_start(args)
        parser.print_help()
        return 0

    if args.command == "scan":
        return cmd_scan(args)

    if args.command == "notify":
        return cmd_notify(args)

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
