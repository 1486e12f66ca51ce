"""Tests for user-facing build output."""

import io
import logging
import re

from gbuild.output import BuildLog, debug_logging
from gbuild.session import ColorMode, LogLevel, Session

TIMESTAMP = re.compile(r"^\d{2}:\d{2}\.\d{2} ")


def test_lines_are_timestamped():
    stream = io.StringIO()
    BuildLog(stream=stream, color_mode=ColorMode.NEVER).log("hello")
    line = stream.getvalue().rstrip("\n")
    assert TIMESTAMP.match(line)
    assert line.endswith("hello")


def test_level_filtering():
    stream = io.StringIO()
    build_log = BuildLog(level=LogLevel.INFORMATIVE, stream=stream, color_mode=ColorMode.NEVER)

    build_log.log("shown")
    build_log.log("hidden", level=LogLevel.VERBOSE)
    build_log.log_detail("also hidden", level=LogLevel.DEBUG)

    output = stream.getvalue()
    assert "shown" in output
    assert "hidden" not in output


def test_taciturn_still_reports_errors():
    stream = io.StringIO()
    build_log = BuildLog(level=LogLevel.TACITURN, stream=stream, color_mode=ColorMode.NEVER)

    build_log.log("progress")
    build_log.log_warning("careful")
    build_log.log_error("broken")

    assert stream.getvalue().count("\n") == 1
    assert "ERROR: broken" in stream.getvalue()


def test_color_modes():
    colored = io.StringIO()
    BuildLog(stream=colored, color_mode=ColorMode.ALWAYS).log_error("broken")
    assert "\x1b[" in colored.getvalue()

    plain = io.StringIO()
    BuildLog(stream=plain, color_mode=ColorMode.NEVER).log_error("broken")
    assert "\x1b[" not in plain.getvalue()

    # A StringIO is not interactive
    auto = io.StringIO()
    BuildLog(stream=auto, color_mode=ColorMode.IF_INTERACTIVE).log_error("broken")
    assert "\x1b[" not in auto.getvalue()


def test_for_session():
    session = Session(log_level=LogLevel.VERBOSE, color_mode=ColorMode.NEVER)
    build_log = BuildLog.for_session(session, io.StringIO())
    assert build_log.level is LogLevel.VERBOSE
    assert build_log.color_mode is ColorMode.NEVER


def test_markup_is_not_interpreted():
    stream = io.StringIO()
    BuildLog(stream=stream, color_mode=ColorMode.NEVER).log("[bold]literal[/bold]")
    assert "[bold]literal[/bold]" in stream.getvalue()


def test_timed_logger():
    stream = io.StringIO()
    build_log = BuildLog(level=LogLevel.VERBOSE, stream=stream, color_mode=ColorMode.NEVER)

    with build_log.timed("processing file `calc.lalrpop`") as timer:
        timer.detail("wrote calc.rs")

    lines = stream.getvalue().splitlines()
    assert lines[0].endswith("processing file `calc.lalrpop`")
    assert lines[1].endswith("wrote calc.rs")
    assert "Done (" in lines[2]


def test_log_levels_are_ordered():
    assert LogLevel.TACITURN < LogLevel.INFORMATIVE < LogLevel.VERBOSE < LogLevel.DEBUG


def test_debug_logging_is_scoped():
    package_logger = logging.getLogger("gbuild")
    handlers_before = list(package_logger.handlers)
    level_before = package_logger.level
    stream = io.StringIO()

    with debug_logging(stream):
        assert len(package_logger.handlers) == len(handlers_before) + 1
        logging.getLogger("gbuild.build.driver").debug("diagnostic")

    logging.getLogger("gbuild.build.driver").debug("after the run")

    assert "gbuild.build.driver: DEBUG: diagnostic" in stream.getvalue()
    assert "after the run" not in stream.getvalue()
    assert package_logger.handlers == handlers_before
    assert package_logger.level == level_before
