"""
Tests for the command line interface.
"""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from logsentry.cli import main
from logsentry.errors import DeliveryError

ConfigWriter = Callable[[str], Path]

CONSOLE_CONFIG = """
log:
  alertKeywords: ["ERROR", "panic"]
notification:
  type: "console"
  messageTemplate: "[{Keyword}] {Line}"
"""


def run_cli(*argv: str) -> int:
    with patch("sys.argv", ["logsentry", *argv]):
        return main()


class TestCli:
    """Tests for CLI commands."""

    def test_config_validate(self, write_config: ConfigWriter,
                             capsys: pytest.CaptureFixture[str]) -> None:
        """Test validating a good config."""
        config_file = write_config(CONSOLE_CONFIG)

        assert run_cli("-c", str(config_file), "config", "validate") == 0
        out = capsys.readouterr().out
        assert "Configuration valid" in out
        assert "ERROR, panic" in out

    def test_config_validate_invalid(self, write_config: ConfigWriter,
                                     capsys: pytest.CaptureFixture[str]) -> None:
        """Test validating a config with unknown fields."""
        config_file = write_config(CONSOLE_CONFIG + "extra: true\n")

        assert run_cli("-c", str(config_file), "config", "validate") == 1
        assert "Configuration invalid" in capsys.readouterr().err

    def test_missing_config(self, tmp_path: Path) -> None:
        """Test that a missing config file fails every command."""
        missing = str(tmp_path / "nope.yaml")

        assert run_cli("-c", missing, "config", "validate") == 1
        assert run_cli("-c", missing, "scan", "app.log") == 1
        assert run_cli("-c", missing, "notify", "hi") == 1

    def test_scan(self, tmp_path: Path, write_config: ConfigWriter,
                  capsys: pytest.CaptureFixture[str]) -> None:
        """Test a one-off scan prints every alert from the start of the file."""
        config_file = write_config(CONSOLE_CONFIG)
        log_file = tmp_path / "app.log"
        log_file.write_text("INFO ok\nERROR panic: disk full\npartial ERROR")

        assert run_cli("-c", str(config_file), "scan", str(log_file)) == 0

        captured = capsys.readouterr()
        assert captured.out.splitlines() == [
            "[ERROR] ERROR panic: disk full",
            "[panic] ERROR panic: disk full",
        ]
        assert "2 alert(s)" in captured.err

    def test_scan_missing_file(self, tmp_path: Path, write_config: ConfigWriter) -> None:
        """Test scanning a file that does not exist."""
        config_file = write_config(CONSOLE_CONFIG)

        assert run_cli("-c", str(config_file), "scan", str(tmp_path / "none.log")) == 1

    def test_notify(self, write_config: ConfigWriter,
                    capsys: pytest.CaptureFixture[str]) -> None:
        """Test sending a manual notification through the console notifier."""
        config_file = write_config(CONSOLE_CONFIG)

        assert run_cli("-c", str(config_file), "notify", "hello there") == 0
        assert "hello there" in capsys.readouterr().out

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that running without a command prints help."""
        assert run_cli() == 0
        assert "usage" in capsys.readouterr().out

    def test_daemon_start_uses_signal_handling(self, tmp_path: Path,
                                               write_config: ConfigWriter) -> None:
        """Test that daemon start runs under signal handling and honours --log-file."""
        config_file = write_config(CONSOLE_CONFIG)
        log_file = tmp_path / "logsentry.log"

        with patch("logsentry.cli.run_until_signalled") as mock_run:
            assert run_cli("-c", str(config_file), "--log-file", str(log_file),
                           "daemon", "start") == 0

        mock_run.assert_called_once()
        assert log_file.exists()

    def test_daemon_start_failure(self, write_config: ConfigWriter,
                                  capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a startup error is reported with a non-zero exit."""
        config_file = write_config(CONSOLE_CONFIG)

        with patch("logsentry.cli.run_until_signalled", side_effect=DeliveryError("down")):
            assert run_cli("-c", str(config_file), "daemon", "start") == 1

        assert "down" in capsys.readouterr().err
