"""
Per-file read cursors for tailing growing log files.

Each watched path owns one open binary handle and the byte offset already
consumed. Files present when watching begins start at end-of-file so that
history is never alerted on; files created afterwards start at byte 0.

The tracker is not thread-safe. It is owned by the dispatcher, which is
the only consumer of watch events.
"""

import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

from logsentry.errors import AccessError, StreamError
from logsentry.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class WatchedFile:
    """A log file under observation."""
    path: str
    handle: BinaryIO
    offset: int  # Bytes already consumed; only ever grows


class OffsetTracker:
    """Tracks read cursors for every watched file."""

    def __init__(self) -> None:
        self._files: dict[str, WatchedFile] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def offset(self, path: str) -> int | None:
        """Return the current cursor for a path, or None if untracked."""
        watched = self._files.get(path)
        return watched.offset if watched else None

    def register(self, path: str, preexisting: bool) -> None:
        """
        Start tracking a file, replacing any existing cursor for the path.

        Args:
            path: Path of the file to track
            preexisting: True if the file existed when watching began; its
                current content is skipped. False reads from the start.

        Raises:
            AccessError: If the file cannot be opened
        """
        try:
            handle = open(path, 'rb')  # pylint: disable=consider-using-with
        except OSError as e:
            raise AccessError(path, e.strerror or str(e)) from e

        offset = handle.seek(0, os.SEEK_END) if preexisting else 0

        previous = self._files.pop(path, None)
        if previous is not None:
            logger.debug(
                "Replacing cursor for %s (was at byte %d)", path, previous.offset
            )
            previous.handle.close()

        self._files[path] = WatchedFile(path=path, handle=handle, offset=offset)
        logger.debug("Tracking %s from byte %d", path, offset)

    def forget(self, path: str) -> bool:
        """
        Stop tracking a file and close its handle.

        Returns:
            True if the path was tracked
        """
        watched = self._files.pop(path, None)
        if watched is None:
            return False
        watched.handle.close()
        logger.debug("Stopped tracking %s", path)
        return True

    def drain(self, path: str) -> Iterator[str]:
        """
        Lazily read every complete line available past the cursor.

        The cursor advances past each line before it is yielded, so a line
        is produced at most once. An unterminated trailing line is left in
        place until a later call finds its newline.

        Args:
            path: Path of a tracked file; untracked paths yield nothing

        Yields:
            Complete lines, including the trailing newline

        Raises:
            StreamError: If the file was removed or truncated below the
                cursor. The path is no longer tracked afterwards.
        """
        watched = self._files.get(path)
        if watched is None:
            return

        self._check_length(watched)

        try:
            watched.handle.seek(watched.offset)
            while True:
                raw = watched.handle.readline()
                if not raw.endswith(b"\n"):
                    # Nothing left, or a partial line still being written
                    return
                watched.offset += len(raw)
                yield raw.decode('utf-8', errors='ignore')
        except OSError as e:
            self.forget(path)
            raise StreamError(path, e.strerror or str(e)) from e

    def _check_length(self, watched: WatchedFile) -> None:
        """Drop the file if it vanished or shrank below the cursor."""
        try:
            size = os.stat(watched.path).st_size
        except FileNotFoundError as e:
            self.forget(watched.path)
            raise StreamError(watched.path, "file was removed") from e
        except OSError as e:
            self.forget(watched.path)
            raise StreamError(watched.path, e.strerror or str(e)) from e

        if size < watched.offset:
            offset = watched.offset
            self.forget(watched.path)
            raise StreamError(
                watched.path,
                f"file was truncated to {size} bytes below cursor at {offset}"
            )

    def close(self) -> None:
        """Close every open handle."""
        for watched in self._files.values():
            watched.handle.close()
        self._files.clear()
