"""
Build system components for gbuild.

This module provides:
- Grammar file discovery
- Input to output path mapping
- Staleness checks against generated files
- Per-file and per-directory build orchestration
"""

from .discovery import DiscoveredFile, discover_grammar_files
from .driver import BuildDriver, BuildOutcome, OutcomeKind
from .path_mapper import PathMapper
from .staleness import StalenessChecker, StalenessDecision

__all__ = [
    "BuildDriver",
    "BuildOutcome",
    "DiscoveredFile",
    "OutcomeKind",
    "PathMapper",
    "StalenessChecker",
    "StalenessDecision",
    "discover_grammar_files",
]
