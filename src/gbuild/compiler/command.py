"""External grammar compiler adapter.

CommandCompiler runs a grammar compiler executable once per stale grammar.
The executable receives the grammar path plus flags derived from the
session, prints generated code on stdout, and reports problems on stderr
with a non-zero exit status:

    <command...> [--comments] [--no-whitespace] [--report <path>]
                 [--features a,b] --macro-recursion-limit N
                 --color always|never <grammar>

Diagnostics of the form `file:line:column: message` become structured
CompileErrors; anything else is reported verbatim.
"""

import logging
import re
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from ..build.path_mapper import PathMapper
from ..errors import CompileError
from ..session import ColorMode, Session
from .artifact import ArtifactWriter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300

_DIAGNOSTIC_RE = re.compile(r"^(?P<file>[^\n]+?):(?P<line>\d+):(?P<column>\d+):\s*(?P<message>.+)$", re.MULTILINE)


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW (prevents console window)
        - Other platforms: 0 (no special flags)
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def parse_diagnostic(input_path: Path, stderr: str, returncode: int) -> CompileError:
    """Turn compiler stderr into a CompileError.

    Args:
        input_path: Grammar being compiled
        stderr: Captured standard error
        returncode: Exit status of the compiler

    Returns:
        CompileError located at the first `file:line:column:` diagnostic,
        or carrying the whole stderr when none is found
    """
    match = _DIAGNOSTIC_RE.search(stderr)
    if match:
        return CompileError(
            Path(match.group("file")),
            match.group("message").strip(),
            line=int(match.group("line")),
            column=int(match.group("column")),
        )
    message = stderr.strip() or f"compiler exited with status {returncode}"
    return CompileError(input_path, message)


class CommandCompiler:
    """Compiles grammars by running an external executable.

    Attributes:
        command: Executable and leading arguments
        timeout: Seconds before a compilation is abandoned
    """

    def __init__(self, command: Sequence[str], timeout: Optional[float] = DEFAULT_TIMEOUT):
        if not command:
            raise ValueError("CommandCompiler requires a non-empty command")
        self.command = list(command)
        self.timeout = timeout

    def build_args(self, session: Session, input_path: Path, report_path: Optional[Path] = None) -> List[str]:
        """Assemble the full command line for one grammar."""
        args = list(self.command)
        if session.emit_comments:
            args.append("--comments")
        if not session.emit_whitespace:
            args.append("--no-whitespace")
        if report_path is not None:
            args.extend(["--report", str(report_path)])
        if session.features:
            args.extend(["--features", ",".join(sorted(session.features))])
        args.extend(["--macro-recursion-limit", str(session.macro_recursion_limit)])
        args.extend(["--color", self._color_flag(session.color_mode)])
        args.append(str(input_path))
        return args

    @staticmethod
    def _color_flag(color_mode: ColorMode) -> str:
        if color_mode is ColorMode.IF_INTERACTIVE:
            return "always" if sys.stderr.isatty() else "never"
        return color_mode.value

    def compile(self, session: Session, input_path: Path, output_path: Path) -> Path:
        """Run the compiler and write its output to output_path.

        Raises:
            CompileError: If the compiler is missing, times out or fails
        """
        report_path = PathMapper(session).report_path(input_path) if session.emit_report else None
        cmd = self.build_args(session, input_path, report_path)
        logger.debug(f"Running grammar compiler: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
                creationflags=get_subprocess_creation_flags(),
            )
        except FileNotFoundError:
            raise CompileError(input_path, f"grammar compiler not found: {self.command[0]}")
        except subprocess.TimeoutExpired:
            raise CompileError(input_path, f"grammar compiler timed out after {self.timeout}s")

        if result.returncode != 0:
            raise parse_diagnostic(input_path, result.stderr, result.returncode)

        if result.stderr:
            logger.warning(f"Grammar compiler warnings for {input_path}:\n{result.stderr.rstrip()}")

        return ArtifactWriter(session).write(input_path, output_path, result.stdout)

    def __repr__(self) -> str:
        return f"CommandCompiler({self.command!r})"
