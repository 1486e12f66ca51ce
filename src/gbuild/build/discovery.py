"""Grammar file discovery.

Recursively walks an input root and collects every grammar file, in a
deterministic order: entries are visited in lexicographic order at each
directory level, and a directory's own files and subdirectories are
interleaved by name.

Only regular files are collected. Symlinks are never followed, which rules
out cycles and keeps one grammar from being generated under two names.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from ..errors import BuildIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredFile:
    """A grammar file paired with the artifact it produces.

    Attributes:
        input_path: Grammar file as found under the walk root
        relative_path: input_path relative to the session's in_dir
        mapped_output_path: Where the generated file is written
    """

    input_path: Path
    relative_path: Path
    mapped_output_path: Path


def _scan_sorted(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def _is_grammar_name(name: str, extension: str) -> bool:
    # A file named just ".lalrpop" has no stem to map to an output name
    return len(name) > len(extension) and name.endswith(extension)


def _walk(directory: Path, extension: str, found: List[Path]) -> None:
    for entry in _scan_sorted(directory):
        path = directory / entry.name
        if entry.is_dir(follow_symlinks=False):
            _walk(path, extension, found)
        elif entry.is_symlink():
            logger.debug(f"Not following symlink: {path}")
        elif _is_grammar_name(entry.name, extension) and entry.is_file(follow_symlinks=False):
            found.append(path)


def discover_grammar_files(root: Union[str, Path], extension: str) -> List[Path]:
    """Find every grammar file below root.

    The whole tree is scanned before anything is returned, so an unreadable
    directory anywhere fails the call without partial results.

    Args:
        root: Directory to search
        extension: Grammar file extension, including the leading dot

    Returns:
        Grammar file paths in traversal order

    Raises:
        BuildIOError: If root or any directory below it cannot be read
    """
    root = Path(root)
    found: List[Path] = []
    try:
        _walk(root, extension, found)
    except OSError as e:
        failed = Path(e.filename) if e.filename else root
        raise BuildIOError(failed, e) from e
    logger.debug(f"Discovered {len(found)} grammar file(s) under {root}")
    return found
