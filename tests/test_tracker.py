"""
Tests for the offset tracker and line draining.
"""

from pathlib import Path

import pytest

from logsentry.errors import AccessError, StreamError
from logsentry.tracker import OffsetTracker


def append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(text)


class TestRegister:
    """Tests for OffsetTracker.register."""

    def test_preexisting_file_starts_at_end(self, tmp_path: Path) -> None:
        """Test that content present before startup is skipped."""
        log_file = tmp_path / "old.log"
        log_file.write_bytes(b"x" * 499 + b"\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=True)

        assert tracker.offset(str(log_file)) == 500
        assert list(tracker.drain(str(log_file))) == []

        append(log_file, "X\n")
        assert list(tracker.drain(str(log_file))) == ["X\n"]
        tracker.close()

    def test_new_file_starts_at_zero(self, tmp_path: Path) -> None:
        """Test that a newly created file is read from the first byte."""
        log_file = tmp_path / "new.log"
        log_file.write_text("first\nsecond\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)

        assert tracker.offset(str(log_file)) == 0
        assert list(tracker.drain(str(log_file))) == ["first\n", "second\n"]
        tracker.close()

    def test_missing_file_raises_access_error(self, tmp_path: Path) -> None:
        """Test that an unopenable file raises AccessError and is not tracked."""
        path = str(tmp_path / "missing.log")
        tracker = OffsetTracker()

        with pytest.raises(AccessError) as exc_info:
            tracker.register(path, preexisting=False)

        assert exc_info.value.path == path
        assert path not in tracker

    def test_reregister_replaces_cursor(self, tmp_path: Path) -> None:
        """Test that registering a tracked path again resets its cursor."""
        log_file = tmp_path / "app.log"
        log_file.write_text("one\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=True)
        tracker.register(str(log_file), preexisting=False)

        assert len(tracker) == 1
        assert list(tracker.drain(str(log_file))) == ["one\n"]
        tracker.close()

    def test_forget(self, tmp_path: Path) -> None:
        """Test that forgetting a path stops tracking it."""
        log_file = tmp_path / "app.log"
        log_file.write_text("")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=True)

        assert tracker.forget(str(log_file)) is True
        assert str(log_file) not in tracker
        assert tracker.forget(str(log_file)) is False


class TestDrain:
    """Tests for OffsetTracker.drain."""

    def test_second_drain_is_empty(self, tmp_path: Path) -> None:
        """Test that draining twice without writes yields nothing the second time."""
        log_file = tmp_path / "app.log"
        log_file.write_text("a\nb\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)

        assert list(tracker.drain(str(log_file))) == ["a\n", "b\n"]
        assert list(tracker.drain(str(log_file))) == []
        tracker.close()

    def test_partial_line_waits_for_newline(self, tmp_path: Path) -> None:
        """Test that an unterminated line is returned once, after its newline arrives."""
        log_file = tmp_path / "app.log"
        log_file.write_text("done\npart")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)

        assert list(tracker.drain(str(log_file))) == ["done\n"]
        assert tracker.offset(str(log_file)) == 5

        append(log_file, "ial")
        assert list(tracker.drain(str(log_file))) == []
        assert tracker.offset(str(log_file)) == 5

        append(log_file, " line\nnext")
        assert list(tracker.drain(str(log_file))) == ["partial line\n"]
        assert list(tracker.drain(str(log_file))) == []
        tracker.close()

    def test_drain_is_lazy(self, tmp_path: Path) -> None:
        """Test that the cursor only advances past lines actually consumed."""
        log_file = tmp_path / "app.log"
        log_file.write_text("one\ntwo\nthree\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)

        lines = tracker.drain(str(log_file))
        assert next(lines) == "one\n"
        assert tracker.offset(str(log_file)) == 4
        lines.close()

        assert list(tracker.drain(str(log_file))) == ["two\n", "three\n"]
        tracker.close()

    def test_cursor_counts_bytes(self, tmp_path: Path) -> None:
        """Test that multi-byte characters advance the cursor by their encoded size."""
        log_file = tmp_path / "app.log"
        log_file.write_bytes("héllo\n".encode("utf-8"))

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)

        assert list(tracker.drain(str(log_file))) == ["héllo\n"]
        assert tracker.offset(str(log_file)) == 7
        tracker.close()

    def test_untracked_path_yields_nothing(self, tmp_path: Path) -> None:
        """Test draining a path that was never registered."""
        tracker = OffsetTracker()
        assert list(tracker.drain(str(tmp_path / "other.log"))) == []

    def test_removed_file_raises_stream_error(self, tmp_path: Path) -> None:
        """Test that a removed file is dropped from tracking."""
        log_file = tmp_path / "app.log"
        log_file.write_text("a\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=False)
        log_file.unlink()

        with pytest.raises(StreamError, match="removed"):
            list(tracker.drain(str(log_file)))
        assert str(log_file) not in tracker

    def test_truncated_file_raises_stream_error(self, tmp_path: Path) -> None:
        """Test that a file shrunk below the cursor is dropped from tracking."""
        log_file = tmp_path / "app.log"
        log_file.write_text("a line that is consumed\n")

        tracker = OffsetTracker()
        tracker.register(str(log_file), preexisting=True)
        log_file.write_text("")

        with pytest.raises(StreamError, match="truncated"):
            list(tracker.drain(str(log_file)))
        assert str(log_file) not in tracker
