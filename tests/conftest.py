"""Pytest configuration and fixtures for gbuild tests.

Provides a recording fake compiler, a helper for laying out grammar trees
under tmp_path, and an isolated environment so tests never depend on the
OUT_DIR or CARGO_FEATURE_* variables of the machine running them.
"""

import io
import os
import sys
import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pytest

from gbuild import Configuration, MappingEnvironment
from gbuild.errors import CompileError


class RecordingCompiler:
    """Fake grammar compiler that writes a stub file per grammar.

    Attributes:
        calls: (input_path, output_path) pairs, in call order
        fail_on: Grammar file names that raise CompileError instead
    """

    def __init__(self, fail_on: Optional[Iterable[str]] = None):
        self.calls: List[Tuple[Path, Path]] = []
        self.fail_on = set(fail_on or ())
        self.sessions = []

    def compile(self, session, input_path: Path, output_path: Path) -> Path:
        self.calls.append((Path(input_path), Path(output_path)))
        self.sessions.append(session)
        if Path(input_path).name in self.fail_on:
            raise CompileError(Path(input_path), "unexpected token", line=1, column=5)
        Path(output_path).write_text(f"// generated from {input_path}\n")
        return Path(output_path)

    @property
    def compiled_inputs(self) -> List[Path]:
        return [input_path for input_path, _ in self.calls]


@pytest.fixture
def compiler():
    """A fresh RecordingCompiler."""
    return RecordingCompiler()


@pytest.fixture
def make_compiler():
    """Factory for RecordingCompilers, e.g. make_compiler(fail_on=["b.lalrpop"])."""
    return RecordingCompiler


@pytest.fixture
def make_grammar(tmp_path):
    """Create a grammar file below tmp_path and return its path.

    The file's modification time is pushed one minute into the past so that
    artifacts written during the test are unambiguously newer.
    """

    def _make(relative: str, content: str = "grammar;\n", age: float = 60.0) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        stamp = time.time() - age
        os.utime(path, (stamp, stamp))
        return path

    return _make


@pytest.fixture
def out_env(tmp_path):
    """Environment with OUT_DIR pointing at tmp_path/out and no features."""
    return MappingEnvironment({"OUT_DIR": str(tmp_path / "out")})


@pytest.fixture
def directives():
    """Stream capturing rerun directives."""
    return io.StringIO()


@pytest.fixture
def config(out_env, compiler, directives):
    """Configuration wired to the fake compiler, isolated environment and captured output."""
    return Configuration(environment=out_env).set_compiler(compiler).set_directive_stream(directives).set_log_stream(io.StringIO())


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__
