"""Staleness check for generated files.

A generated file is reused only when it exists and is at least as new as
its grammar. Anything that prevents the comparison, such as an unreadable
timestamp, counts as stale: regenerating is always safe, skipping is not.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StalenessDecision:
    """Result of a staleness check.

    Attributes:
        stale: True if the artifact must be regenerated
        reason: Short human-readable explanation
    """

    stale: bool
    reason: str


class StalenessChecker:
    """Decides whether a grammar file needs regeneration."""

    def __init__(self, session: Session):
        self.force_build = session.force_build

    def check(self, source_path: Path, output_path: Path) -> StalenessDecision:
        """Compare a grammar file against its generated artifact.

        Args:
            source_path: Grammar file
            output_path: Generated file it maps to

        Returns:
            StalenessDecision describing whether and why to regenerate
        """
        if self.force_build:
            return StalenessDecision(True, "forced build")

        try:
            output_mtime = output_path.stat().st_mtime
        except FileNotFoundError:
            logger.debug(f"Generated file missing: {output_path} - regeneration needed")
            return StalenessDecision(True, "no generated file")
        except OSError as e:
            logger.warning(f"Failed to read modification time of {output_path}: {e} - assuming regeneration needed")
            return StalenessDecision(True, "unreadable generated file timestamp")

        try:
            source_mtime = source_path.stat().st_mtime
        except OSError as e:
            logger.warning(f"Failed to read modification time of {source_path}: {e} - assuming regeneration needed")
            return StalenessDecision(True, "unreadable grammar timestamp")

        if output_mtime < source_mtime:
            logger.debug(f"Generated file older than grammar: {output_path} - regeneration needed")
            return StalenessDecision(True, "grammar is newer than generated file")

        logger.debug(f"Skipping unchanged grammar: {source_path}")
        return StalenessDecision(False, "up to date")
