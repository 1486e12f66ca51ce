"""gbuild - incremental grammar builds for build scripts.

Finds grammar files under an input directory, regenerates the ones whose
generated source is missing or out of date, and reports each grammar to
Cargo so the build script reruns when one changes.
"""

from .build import BuildDriver, BuildOutcome, OutcomeKind
from .compiler import CommandCompiler, GrammarCompiler
from .configuration import Configuration, process_root, process_root_unconditionally, process_src
from .environment import MappingEnvironment, ProcessEnvironment
from .errors import (
    BuildIOError,
    CompileError,
    ConfigError,
    ContradictoryInDirError,
    GrammarBuildError,
    MissingOutDirError,
)
from .session import ColorMode, LogLevel, Session
from .version import __version__

__all__ = [
    "BuildDriver",
    "BuildIOError",
    "BuildOutcome",
    "ColorMode",
    "CommandCompiler",
    "CompileError",
    "ConfigError",
    "Configuration",
    "ContradictoryInDirError",
    "GrammarBuildError",
    "GrammarCompiler",
    "LogLevel",
    "MappingEnvironment",
    "MissingOutDirError",
    "OutcomeKind",
    "ProcessEnvironment",
    "Session",
    "__version__",
    "process_root",
    "process_root_unconditionally",
    "process_src",
]
