"""Input to output path mapping.

A grammar file at <in_dir>/<rel>/<name>.lalrpop produces
<out_dir>/<rel>/<name>.rs. When in_dir and out_dir are the same directory
the generated file lands next to its grammar.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..errors import BuildIOError
from ..session import REPORT_EXTENSION, Session
from .discovery import DiscoveredFile

logger = logging.getLogger(__name__)


def _absolute(path: Path) -> Path:
    # abspath normalizes without resolving symlinks
    return Path(os.path.abspath(path))


class PathMapper:
    """Maps grammar paths to artifact paths for one session.

    Attributes:
        in_dir: Input root (defaults to the current directory)
        out_dir: Output root
        source_extension: Grammar file extension
        generated_extension: Generated file extension
    """

    def __init__(self, session: Session):
        self.in_dir = session.effective_in_dir
        self.out_dir = session.resolved_out_dir
        self.source_extension = session.source_extension
        self.generated_extension = session.generated_extension

    def relative_path(self, input_path: Path) -> Optional[Path]:
        """Return input_path relative to in_dir, or None if it lies elsewhere."""
        try:
            return _absolute(input_path).relative_to(_absolute(self.in_dir))
        except ValueError:
            return None

    def _with_extension(self, path: Path, extension: str) -> Path:
        name = path.name
        if name.endswith(self.source_extension):
            name = name[: -len(self.source_extension)]
        else:
            name = path.stem
        return path.with_name(name + extension)

    def _map(self, input_path: Path, extension: str) -> Path:
        relative = self.relative_path(input_path)
        if relative is None:
            # Files outside in_dir are generated beside their grammar
            logger.debug(f"{input_path} is not under {self.in_dir}; generating in place")
            return self._with_extension(input_path, extension)
        return self._with_extension(self.out_dir / relative, extension)

    def output_path(self, input_path: Path) -> Path:
        """Compute the generated source path for a grammar file."""
        return self._map(Path(input_path), self.generated_extension)

    def report_path(self, input_path: Path) -> Path:
        """Compute the report path for a grammar file."""
        return self._map(Path(input_path), REPORT_EXTENSION)

    def discovered(self, input_path: Path) -> DiscoveredFile:
        """Pair a grammar file with its mapped output path."""
        input_path = Path(input_path)
        relative = self.relative_path(input_path)
        return DiscoveredFile(
            input_path=input_path,
            relative_path=relative if relative is not None else Path(input_path.name),
            mapped_output_path=self.output_path(input_path),
        )

    @staticmethod
    def ensure_parent(output_path: Path) -> None:
        """Create any missing directories above output_path.

        Raises:
            BuildIOError: If a directory cannot be created
        """
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildIOError(output_path.parent, e) from e
