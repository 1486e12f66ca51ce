"""Error types for gbuild.

All errors raised by a build run derive from GrammarBuildError so that a
host build script can catch one type and decide whether to abort.

Hierarchy:
    GrammarBuildError
    ├── ConfigError
    │   ├── MissingOutDirError
    │   └── ContradictoryInDirError
    ├── BuildIOError
    └── CompileError
"""

from pathlib import Path
from typing import Optional


class GrammarBuildError(Exception):
    """Base class for every error surfaced by a gbuild run."""

    pass


class ConfigError(GrammarBuildError):
    """Raised while finalizing a Configuration, before any file is touched."""

    pass


class MissingOutDirError(ConfigError):
    """Raised when no output directory is configured and OUT_DIR is absent."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"missing {variable} variable: set an output directory with set_out_dir() or run from a build script")


class ContradictoryInDirError(ConfigError):
    """Raised when process_current_dir() disagrees with a configured in_dir."""

    def __init__(self, in_dir: Path, current_dir: Path):
        self.in_dir = in_dir
        self.current_dir = current_dir
        super().__init__(
            f'"process_current_dir()" contradicts previously set in_dir ({in_dir} != {current_dir}). '
            "Either use `process()` instead, or omit `set_in_dir()`. "
            "To place generated files in the source directory, use `set_out_dir()`."
        )


class BuildIOError(GrammarBuildError):
    """Raised when a directory or file cannot be read or created."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause.strerror or cause}")


class CompileError(GrammarBuildError):
    """Structured failure reported by a grammar compiler.

    The driver never rewrites this error; it is re-raised exactly as the
    compiler produced it.

    Attributes:
        file: Grammar file that failed
        message: Compiler diagnostic
        line: 1-based line number, if known
        column: 1-based column number, if known
    """

    def __init__(self, file: Path, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.file = file
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._render())

    def _render(self) -> str:
        location = str(self.file)
        if self.line is not None:
            location += f":{self.line}"
            if self.column is not None:
                location += f":{self.column}"
        return f"{location}: {self.message}"
