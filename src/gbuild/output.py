"""
User-facing output for gbuild.

All output is prefixed with elapsed time in MM:SS.cc format
(minutes:seconds.centiseconds) so build logs show where time goes, and is
filtered by the session's LogLevel.

Example output:
    00:00.01 processing file `src/parser.lalrpop`
    00:00.34       Done (0.33s)
    00:00.35 1 regenerated, 2 up to date

Usage:
    from gbuild.output import BuildLog

    build_log = BuildLog.for_session(session)
    build_log.log("processing file `src/parser.lalrpop`")
    build_log.log_detail("skipped: up to date", level=LogLevel.VERBOSE)
    build_log.log_error("src/parser.lalrpop:3:7: unexpected token")

Rendering goes through a rich Console so that ColorMode maps directly onto
rich's terminal detection.
"""

import logging
import sys
import time
from contextlib import contextmanager
from types import TracebackType
from typing import Iterator, Optional, TextIO

from rich.console import Console
from rich.text import Text

from .session import ColorMode, LogLevel, Session


def make_console(stream: TextIO, color_mode: ColorMode) -> Console:
    """
    Build a rich Console honoring the color mode.

    Args:
        stream: Destination stream
        color_mode: ALWAYS forces terminal codes, NEVER disables color,
            IF_INTERACTIVE lets rich inspect the stream

    Returns:
        Configured Console
    """
    if color_mode is ColorMode.ALWAYS:
        return Console(file=stream, force_terminal=True, color_system="standard", highlight=False, soft_wrap=True)
    if color_mode is ColorMode.NEVER:
        return Console(file=stream, no_color=True, force_terminal=False, highlight=False, soft_wrap=True)
    return Console(file=stream, highlight=False, soft_wrap=True)


class BuildLog:
    """
    Timestamped, level-filtered output for one build run.

    Messages at a level above the configured level are dropped. Errors are
    always printed, even at TACITURN.
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFORMATIVE,
        color_mode: ColorMode = ColorMode.IF_INTERACTIVE,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the log.

        Args:
            level: Most verbose level that will be printed
            color_mode: Output coloring policy
            stream: Output stream (defaults to sys.stderr, keeping stdout free for directives)
        """
        self.level = level
        self.color_mode = color_mode
        self._stream = stream if stream is not None else sys.stderr
        self._console = make_console(self._stream, color_mode)
        self._start_time = time.time()

    @classmethod
    def for_session(cls, session: Session, stream: Optional[TextIO] = None) -> "BuildLog":
        """Create a log configured from a session's level and color mode."""
        return cls(level=session.log_level, color_mode=session.color_mode, stream=stream)

    def enabled(self, level: LogLevel) -> bool:
        """Check whether messages at the given level are printed."""
        return level <= self.level

    def format_timestamp(self) -> str:
        """
        Format the elapsed time as MM:SS.cc.

        Returns:
            Formatted timestamp string
        """
        elapsed = time.time() - self._start_time
        minutes = int(elapsed // 60)
        seconds = elapsed % 60
        return f"{minutes:02d}:{seconds:05.2f}"

    def _print(self, message: str, style: Optional[str] = None) -> None:
        line = Text(f"{self.format_timestamp()} ")
        line.append(message, style=style)
        self._console.print(line)

    def log(self, message: str, level: LogLevel = LogLevel.INFORMATIVE) -> None:
        """
        Log a message with timestamp.

        Args:
            message: Message to log
            level: Level of the message
        """
        if not self.enabled(level):
            return
        self._print(message)

    def log_detail(self, message: str, indent: int = 6, level: LogLevel = LogLevel.INFORMATIVE) -> None:
        """
        Log a detail message (indented).

        Args:
            message: Detail message
            indent: Number of spaces to indent (default 6)
            level: Level of the message
        """
        if not self.enabled(level):
            return
        self._print(f"{' ' * indent}{message}")

    def log_error(self, message: str) -> None:
        """Log an error message. Errors are never filtered."""
        self._print(f"ERROR: {message}", style="bold red")

    def log_warning(self, message: str) -> None:
        """Log a warning message."""
        if not self.enabled(LogLevel.INFORMATIVE):
            return
        self._print(f"WARNING: {message}", style="yellow")

    def log_summary(self, regenerated: int, skipped: int) -> None:
        """Log the end-of-run counts."""
        self.log(f"{regenerated} regenerated, {skipped} up to date")

    def timed(self, operation: str, level: LogLevel = LogLevel.INFORMATIVE) -> "TimedLogger":
        """Return a TimedLogger bound to this log."""
        return TimedLogger(self, operation, level)


class TimedLogger:
    """
    Context manager for logging with elapsed time tracking.

    Usage:
        with build_log.timed("processing file `parser.lalrpop`") as timer:
            # Do compilation
            timer.detail("wrote parser.rs")
        # Completion time is logged at VERBOSE level
    """

    def __init__(self, build_log: BuildLog, operation: str, level: LogLevel = LogLevel.INFORMATIVE):
        self.build_log = build_log
        self.operation = operation
        self.level = level
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        self.build_log.log(self.operation, self.level)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            self.build_log.log_detail(f"Done ({elapsed:.2f}s)", level=LogLevel.VERBOSE)
        return None

    def detail(self, message: str) -> None:
        """Log a detail message within this operation."""
        self.build_log.log_detail(message, level=self.level)


@contextmanager
def debug_logging(stream: Optional[TextIO] = None) -> Iterator[None]:
    """
    Route gbuild's module loggers to a stream at DEBUG level for one run.

    The handler is removed and the previous logger level restored on exit,
    so a later run at a quieter level sees no debug output.

    Args:
        stream: Destination stream (defaults to sys.stderr)
    """
    package_logger = logging.getLogger("gbuild")
    previous_level = package_logger.level
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(levelname)s: %(message)s"))
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(handler)
    try:
        yield
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)
