"""Grammar compiler interface.

The build driver does not know how grammars are compiled. It hands each
stale grammar to a GrammarCompiler, which writes the generated file and
either returns its path or raises CompileError.
"""

from pathlib import Path
from typing import Callable, Protocol, Union, runtime_checkable

from ..errors import CompileError
from ..session import Session

__all__ = ["CompileError", "CompilerLike", "GrammarCompiler", "as_compiler"]


@runtime_checkable
class GrammarCompiler(Protocol):
    """Turns one grammar file into one generated source file."""

    def compile(self, session: Session, input_path: Path, output_path: Path) -> Path:
        """Compile input_path and write the result to output_path.

        Args:
            session: Settings for this run
            input_path: Grammar file
            output_path: Destination; its parent directory already exists

        Returns:
            Path of the written artifact

        Raises:
            CompileError: If the grammar cannot be compiled
        """
        ...


CompilerFunction = Callable[[Session, Path, Path], Path]
CompilerLike = Union[GrammarCompiler, CompilerFunction]


class _FunctionCompiler:
    def __init__(self, function: CompilerFunction):
        self.function = function

    def compile(self, session: Session, input_path: Path, output_path: Path) -> Path:
        return self.function(session, input_path, output_path)

    def __repr__(self) -> str:
        return f"_FunctionCompiler({self.function!r})"


def as_compiler(compiler: CompilerLike) -> GrammarCompiler:
    """Accept either a GrammarCompiler or a plain function with the same signature."""
    if isinstance(compiler, GrammarCompiler):
        return compiler
    if callable(compiler):
        return _FunctionCompiler(compiler)
    raise TypeError(f"Expected a GrammarCompiler or callable, got {type(compiler).__name__}")
