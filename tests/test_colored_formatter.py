"""Tests for ColoredFormatter."""

import logging
from io import StringIO
from unittest.mock import patch

import pytest

from classroom_jukebox.utils.logging import ColoredFormatter

RESET = "\033[0m"
DIM = "\033[2m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


def _make_record(level: int, message: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name="classroom_jukebox.sync",
        level=level,
        pathname="sync.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


def _tty_formatter(fmt: str = "%(levelname)s | %(message)s") -> ColoredFormatter:
    stream = StringIO()
    stream.isatty = lambda: True  # type: ignore[method-assign]
    return ColoredFormatter(fmt, stream=stream)


class TestColoredFormatter:
    """Tests for ANSI color formatting."""

    @pytest.mark.parametrize(
        "level",
        [logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL],
    )
    def test_color_applied_per_level(self, level: int):
        """Should apply the correct ANSI color code for each level."""
        output = _tty_formatter().format(_make_record(level))

        assert LEVEL_COLORS[level] in output
        assert RESET in output

    def test_logger_name_dimmed(self):
        fmt = _tty_formatter("%(name)s | %(message)s")

        output = fmt.format(_make_record(logging.INFO))

        assert f"{DIM}classroom_jukebox.sync{RESET}" in output

    def test_no_color_when_no_color_env_set(self):
        """Should not apply colors when NO_COLOR env var is set."""
        fmt = _tty_formatter()

        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            output = fmt.format(_make_record(logging.INFO))

        assert "\033[" not in output

    def test_no_color_when_stream_not_tty(self):
        """Should not apply colors when stream is not a TTY."""
        fmt = ColoredFormatter("%(levelname)s | %(message)s", stream=StringIO())

        output = fmt.format(_make_record(logging.ERROR))

        assert "\033[" not in output

    def test_format_output_matches_pattern(self):
        """Should produce output matching the configured format string."""
        output = _tty_formatter().format(_make_record(logging.INFO, "queue synced"))

        plain = output.replace(LEVEL_COLORS[logging.INFO], "").replace(RESET, "")
        assert plain == "INFO | queue synced"

    def test_original_record_not_mutated(self):
        """Should not mutate the original LogRecord."""
        record = _make_record(logging.WARNING)

        _tty_formatter("%(name)s %(levelname)s").format(record)

        assert record.levelname == "WARNING"
        assert record.name == "classroom_jukebox.sync"
