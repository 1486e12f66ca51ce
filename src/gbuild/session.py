"""Session - Immutable configuration snapshot for one build run.

This module defines:
- ColorMode: How user-facing output is colored
- LogLevel: How much progress output is shown
- Session: Frozen snapshot produced by Configuration.finalize()

Design:
    Configuration is staged and mutable, owned by the caller.
    Each process_* call finalizes it into a fresh Session, which flows
    read-only through discovery, staleness checks and the compiler.
    Nothing a run does is ever written back into the Configuration.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from pathlib import Path
from typing import Any, FrozenSet, Optional

DEFAULT_SOURCE_EXTENSION = ".lalrpop"
DEFAULT_GENERATED_EXTENSION = ".rs"
REPORT_EXTENSION = ".report"
DEFAULT_MACRO_RECURSION_LIMIT = 200
MAX_MACRO_RECURSION_LIMIT = 0xFFFF


class ColorMode(Enum):
    """Output coloring policy."""

    ALWAYS = "always"
    NEVER = "never"
    IF_INTERACTIVE = "auto"

    def __str__(self) -> str:
        return self.value


@total_ordering
class LogLevel(Enum):
    """Verbosity of user-facing output, from least to most chatty."""

    TACITURN = 0
    INFORMATIVE = 1
    VERBOSE = 2
    DEBUG = 3

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value < other.value


@dataclass(frozen=True)
class Session:
    """Read-only settings shared by every stage of a run.

    Attributes:
        color_mode: Output coloring policy
        in_dir: Root searched for grammar files (None means current directory)
        out_dir: Root for generated files (always set once finalized)
        force_build: Regenerate every file regardless of timestamps
        emit_rerun_directives: Print a rerun-if-changed line per grammar file
        emit_comments: Ask the compiler to keep comments in generated code
        emit_whitespace: Ask the compiler to keep formatting whitespace
        emit_report: Ask the compiler to write a .report file
        log_level: Output verbosity
        macro_recursion_limit: Macro expansion depth passed to the compiler
        features: Enabled features (None until resolved)
        unit_test: Deterministic mode used by the test suite
        source_extension: Extension of grammar files, with leading dot
        generated_extension: Extension of generated files, with leading dot
    """

    color_mode: ColorMode = ColorMode.IF_INTERACTIVE
    in_dir: Optional[Path] = None
    out_dir: Optional[Path] = None
    force_build: bool = False
    emit_rerun_directives: bool = False
    emit_comments: bool = False
    emit_whitespace: bool = True
    emit_report: bool = False
    log_level: LogLevel = LogLevel.INFORMATIVE
    macro_recursion_limit: int = DEFAULT_MACRO_RECURSION_LIMIT
    features: Optional[FrozenSet[str]] = None
    unit_test: bool = False
    source_extension: str = DEFAULT_SOURCE_EXTENSION
    generated_extension: str = DEFAULT_GENERATED_EXTENSION

    def with_changes(self, **changes: Any) -> "Session":
        """Return a copy of this session with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    @property
    def effective_in_dir(self) -> Path:
        """Input root, defaulting to the current directory."""
        return self.in_dir if self.in_dir is not None else Path(".")

    @property
    def resolved_out_dir(self) -> Path:
        """Output root of a finalized session.

        Raises:
            RuntimeError: If called on a session that was never finalized
        """
        if self.out_dir is None:
            raise RuntimeError("Session.out_dir is unset; finalize the Configuration first")
        return self.out_dir
