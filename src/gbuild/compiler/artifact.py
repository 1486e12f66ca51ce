"""Generated file writer.

Generated files start with a two-line header naming the generator and the
SHA3-256 digest of the grammar they came from, and are left read-only so
that hand edits are not silently lost on the next regeneration.

Writes go through a temporary file followed by an atomic rename, so a
failed generation never leaves a truncated artifact behind.
"""

import hashlib
import logging
import os
import stat
from pathlib import Path

from ..errors import BuildIOError
from ..session import Session
from ..version import __version__

logger = logging.getLogger(__name__)

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def source_digest(source_path: Path) -> str:
    """Calculate the SHA3-256 digest of a grammar file.

    Raises:
        BuildIOError: If the grammar cannot be read
    """
    sha3 = hashlib.sha3_256()
    try:
        with open(source_path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha3.update(chunk)
    except OSError as e:
        raise BuildIOError(source_path, e) from e
    return sha3.hexdigest()


def set_read_only(path: Path, read_only: bool) -> None:
    """Toggle the write permission bits of an existing file."""
    mode = path.stat().st_mode
    if read_only:
        path.chmod(mode & ~_WRITE_BITS)
    else:
        path.chmod(mode | stat.S_IWUSR)


class ArtifactWriter:
    """Writes generated text with a provenance header."""

    def __init__(self, session: Session):
        self.unit_test = session.unit_test

    def header(self, source_path: Path) -> str:
        """Build the header for a file generated from source_path."""
        # Version is omitted in unit-test mode so expected outputs stay stable across releases
        generator = "gbuild" if self.unit_test else f"gbuild {__version__}"
        return f'// auto-generated: "{generator}"\n// sha3: {source_digest(source_path)}\n'

    def write(self, source_path: Path, output_path: Path, generated: str) -> Path:
        """Write generated text to output_path.

        Args:
            source_path: Grammar the text was generated from
            output_path: Destination file
            generated: Generated source text

        Returns:
            output_path

        Raises:
            BuildIOError: If the file cannot be written
        """
        content = self.header(source_path) + generated
        temp_path = output_path.with_name(output_path.name + ".tmp")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            if output_path.exists():
                set_read_only(output_path, False)
            with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(temp_path, output_path)
            set_read_only(output_path, True)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise BuildIOError(output_path, e) from e

        logger.debug(f"Wrote {len(content)} bytes to {output_path}")
        return output_path
