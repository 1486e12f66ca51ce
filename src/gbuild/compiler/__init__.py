"""Grammar compiler integration."""

from .artifact import ArtifactWriter
from .base import CompileError, CompilerLike, GrammarCompiler, as_compiler
from .command import CommandCompiler

__all__ = [
    "ArtifactWriter",
    "CommandCompiler",
    "CompileError",
    "CompilerLike",
    "GrammarCompiler",
    "as_compiler",
]
