"""Configuration - staged settings for running gbuild from a build script.

Typical build.py usage:

    from gbuild import Configuration

    Configuration().use_cargo_dir_conventions().emit_rerun_directives(True).process()

Every setter returns the Configuration so calls can be chained. The
Configuration is never modified by a run; each process_* call finalizes
its own Session, so one Configuration can drive several independent runs.
"""

import logging
import os
import shlex
from contextlib import nullcontext
from pathlib import Path
from typing import ContextManager, Iterable, List, Optional, TextIO, Union

from .build.driver import BuildDriver, BuildOutcome
from .compiler.base import CompilerLike
from .compiler.command import CommandCompiler
from .environment import OUT_DIR_VAR, Environment, ProcessEnvironment, resolve_features, resolve_out_dir
from .errors import ContradictoryInDirError, MissingOutDirError
from .output import BuildLog, debug_logging
from .session import MAX_MACRO_RECURSION_LIMIT, ColorMode, LogLevel, Session

logger = logging.getLogger(__name__)

COMPILER_VAR = "GBUILD_COMPILER"
DEFAULT_COMPILER_COMMAND = ("lalrpop",)

PathLike = Union[str, Path]


class Configuration:
    """Configure how grammar files are found, checked and generated.

    To get the default configuration, use `Configuration()`.
    """

    def __init__(self, environment: Optional[Environment] = None):
        """Initialize with default settings.

        Args:
            environment: Source of OUT_DIR and CARGO_FEATURE_* (defaults to os.environ)
        """
        self._session = Session()
        self._environment: Environment = environment if environment is not None else ProcessEnvironment()
        self._compiler: Optional[CompilerLike] = None
        self._directive_stream: Optional[TextIO] = None
        self._log_stream: Optional[TextIO] = None

    @property
    def staged(self) -> Session:
        """Currently staged settings, before environment defaults are applied."""
        return self._session

    def _stage(self, **changes) -> "Configuration":
        self._session = self._session.with_changes(**changes)
        return self

    def always_use_colors(self) -> "Configuration":
        """Always use ANSI colors in output, even if output is not a TTY."""
        return self._stage(color_mode=ColorMode.ALWAYS)

    def never_use_colors(self) -> "Configuration":
        """Never use ANSI colors in output, even if output is a TTY."""
        return self._stage(color_mode=ColorMode.NEVER)

    def use_colors_if_tty(self) -> "Configuration":
        """Use ANSI colors only when output is a TTY. This is the default."""
        return self._stage(color_mode=ColorMode.IF_INTERACTIVE)

    def set_in_dir(self, path: PathLike) -> "Configuration":
        """Specify the directory searched for grammar files.

        The directory is searched recursively. Output paths are made
        relative to it before being placed under the output directory.
        By default, the current working directory is used.
        """
        return self._stage(in_dir=Path(path))

    def set_out_dir(self, path: PathLike) -> "Configuration":
        """Specify the directory generated files are written to.

        By default, the directory named by OUT_DIR is used.
        """
        return self._stage(out_dir=Path(path))

    def use_cargo_dir_conventions(self) -> "Configuration":
        """Search `src` and write to OUT_DIR.

        OUT_DIR is read immediately.

        Raises:
            MissingOutDirError: If OUT_DIR is not set
        """
        out_dir = resolve_out_dir(self._environment)
        if out_dir is None:
            raise MissingOutDirError(OUT_DIR_VAR)
        return self.set_in_dir("src").set_out_dir(out_dir)

    def generate_in_source_tree(self) -> "Configuration":
        """Write each generated file next to its grammar."""
        return self.set_in_dir(".").set_out_dir(".")

    def force_build(self, value: bool) -> "Configuration":
        """If true, regenerate every grammar even when its output is newer."""
        return self._stage(force_build=value)

    def emit_rerun_directives(self, value: bool) -> "Configuration":
        """If true, print a `cargo:rerun-if-changed` line for each grammar.

        Once a build script emits any rerun directive, Cargo only reruns it
        when a watched file changes, so the default is false.
        """
        return self._stage(emit_rerun_directives=value)

    def emit_comments(self, value: bool) -> "Configuration":
        """If true, keep comments in generated code. Default is false."""
        return self._stage(emit_comments=value)

    def emit_whitespace(self, value: bool) -> "Configuration":
        """If false, strip redundant whitespace from generated code. Default is true."""
        return self._stage(emit_whitespace=value)

    def emit_report(self, value: bool) -> "Configuration":
        """If true, write a .report file next to each generated file."""
        return self._stage(emit_report=value)

    def log_quiet(self) -> "Configuration":
        """Minimal logs: only errors that halt progress."""
        return self._stage(log_level=LogLevel.TACITURN)

    def log_info(self) -> "Configuration":
        """Informative logs: high-level progress (default)."""
        return self._stage(log_level=LogLevel.INFORMATIVE)

    def log_verbose(self) -> "Configuration":
        """Verbose logs: also explain skipped files and timings."""
        return self._stage(log_level=LogLevel.VERBOSE)

    def log_debug(self) -> "Configuration":
        """Debug logs: everything, including module-level diagnostics."""
        return self._stage(log_level=LogLevel.DEBUG)

    def set_macro_recursion_limit(self, value: int) -> "Configuration":
        """Set the macro expansion depth passed to the compiler. Default is 200.

        Raises:
            ValueError: If value does not fit in 16 bits
        """
        if not 0 <= value <= MAX_MACRO_RECURSION_LIMIT:
            raise ValueError(f"macro recursion limit must be between 0 and {MAX_MACRO_RECURSION_LIMIT}, got {value}")
        return self._stage(macro_recursion_limit=value)

    def set_features(self, features: Iterable[str]) -> "Configuration":
        """Use exactly these features instead of reading CARGO_FEATURE_* variables."""
        return self._stage(features=frozenset(features))

    def unit_test(self) -> "Configuration":
        """Deterministic mode for the test suite."""
        return self._stage(unit_test=True)

    def set_source_extension(self, extension: str) -> "Configuration":
        """Set the grammar file extension (default `.lalrpop`)."""
        return self._stage(source_extension=_dotted(extension))

    def set_generated_extension(self, extension: str) -> "Configuration":
        """Set the generated file extension (default `.rs`)."""
        return self._stage(generated_extension=_dotted(extension))

    def set_compiler(self, compiler: CompilerLike) -> "Configuration":
        """Use this compiler for stale grammars.

        Defaults to running the command in GBUILD_COMPILER, or `lalrpop`.
        """
        self._compiler = compiler
        return self

    def set_environment(self, environment: Environment) -> "Configuration":
        """Read OUT_DIR and features from this environment instead of os.environ."""
        self._environment = environment
        return self

    def set_directive_stream(self, stream: TextIO) -> "Configuration":
        """Write rerun directives to this stream instead of stdout."""
        self._directive_stream = stream
        return self

    def set_log_stream(self, stream: TextIO) -> "Configuration":
        """Write progress output to this stream instead of stderr."""
        self._log_stream = stream
        return self

    def finalize(self) -> Session:
        """Apply environment defaults and return a fresh Session.

        Raises:
            MissingOutDirError: If no output directory is set and OUT_DIR is absent
        """
        session = self._session

        out_dir = session.out_dir
        if out_dir is None:
            # Cargo conventions by default
            out_dir = resolve_out_dir(self._environment)
            if out_dir is None:
                raise MissingOutDirError(OUT_DIR_VAR)

        features = session.features
        if features is None:
            features = frozenset() if session.unit_test else resolve_features(self._environment)

        return session.with_changes(out_dir=out_dir, features=features)

    def _resolve_compiler(self) -> CompilerLike:
        if self._compiler is not None:
            return self._compiler
        command = self._environment.get(COMPILER_VAR)
        return CommandCompiler(shlex.split(command) if command else DEFAULT_COMPILER_COMMAND)

    def _debug_scope(self, session: Session) -> ContextManager[None]:
        if session.log_level is LogLevel.DEBUG:
            return debug_logging(self._log_stream)
        return nullcontext()

    def _driver(self, session: Session) -> BuildDriver:
        logger.debug(f"Finalized session: in_dir={session.effective_in_dir} out_dir={session.out_dir} features={sorted(session.features or ())}")
        return BuildDriver(
            session,
            self._resolve_compiler(),
            build_log=BuildLog.for_session(session, self._log_stream),
            directive_stream=self._directive_stream,
        )

    def process(self) -> List[BuildOutcome]:
        """Process every grammar under the configured input directory."""
        return self.process_dir(self._session.effective_in_dir)

    def process_current_dir(self) -> List[BuildOutcome]:
        """Process every grammar under the current working directory.

        Raises:
            ContradictoryInDirError: If an in_dir other than the current
                directory was set
        """
        session = self.finalize()
        current_dir = Path.cwd()
        in_dir = session.in_dir
        if in_dir is not None and Path(os.path.abspath(in_dir)) != current_dir:
            raise ContradictoryInDirError(in_dir, current_dir)
        with self._debug_scope(session):
            return self._driver(session).process_dir(current_dir)

    def process_dir(self, path: PathLike) -> List[BuildOutcome]:
        """Process every grammar under path."""
        session = self.finalize()
        with self._debug_scope(session):
            return self._driver(session).process_dir(path)

    def process_file(self, path: PathLike) -> List[BuildOutcome]:
        """Process a single grammar file."""
        session = self.finalize()
        with self._debug_scope(session):
            return [self._driver(session).process_file(path)]


def _dotted(extension: str) -> str:
    if not extension or extension == ".":
        raise ValueError("extension must not be empty")
    return extension if extension.startswith(".") else f".{extension}"


def process_root() -> List[BuildOutcome]:
    """Process all grammars in the current directory.

    Equivalent to `Configuration().process_current_dir()`.
    """
    return Configuration().process_current_dir()


def process_src() -> List[BuildOutcome]:
    """Process all grammars in ./src.

    Equivalent to `Configuration().set_in_dir("./src").process()`.
    """
    return Configuration().set_in_dir("./src").process()


def process_root_unconditionally() -> List[BuildOutcome]:
    """Regenerate all grammars in the current directory, ignoring timestamps.

    Equivalent to `Configuration().force_build(True).process_current_dir()`.
    """
    return Configuration().force_build(True).process_current_dir()
