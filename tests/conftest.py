"""
Pytest configuration and fixtures for Logsentry tests.
"""

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from logsentry.core import Notifier
from logsentry.errors import DeliveryError
from logsentry.logging_config import ROOT_LOGGER

class RecordingNotifier(Notifier):
    """Notifier that keeps every message instead of sending it."""

    def __init__(self, fail_times: int = 0, **config: object) -> None:
        super().__init__(dict(config))
        self.messages: list[str] = []
        self.attempts = 0
        self.fail_times = fail_times

    def send(self, message: str) -> None:
        self.attempts += 1
        if self.attempts <= self.fail_times:
            raise DeliveryError(f"simulated failure {self.attempts}")
        self.messages.append(message)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write YAML text to a config file and return its path."""
    def _write(text: str) -> Path:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(text)
        return config_file
    return _write


def wait_until(condition: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Poll a condition until it holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.02)
    return condition()


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo handlers installed by setup_logging() in CLI and daemon tests."""
    yield
    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
