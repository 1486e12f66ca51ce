"""Build driver - per-file and per-directory orchestration.

Each grammar goes through:

    discovered -> staleness check -> stale     -> compile -> REGENERATED | FAILED
                                  -> not stale -> SKIPPED

A directory run processes files in discovery order and stops at the first
failure. Files generated earlier in the run are kept; the failing error is
re-raised exactly as the compiler raised it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, TextIO, Union

from ..compiler.base import CompilerLike, as_compiler
from ..errors import BuildIOError, GrammarBuildError
from ..output import BuildLog
from ..session import LogLevel, Session
from .directives import DirectiveEmitter
from .discovery import DiscoveredFile, discover_grammar_files
from .path_mapper import PathMapper
from .staleness import StalenessChecker

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    """Terminal state of one grammar file."""

    SKIPPED = "skipped"
    REGENERATED = "regenerated"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BuildOutcome:
    """What happened to one grammar file.

    Attributes:
        kind: Terminal state
        input_path: Grammar file
        output_path: Generated file it maps to
        reason: Why the file was skipped (SKIPPED only)
        error: Error that stopped the run (FAILED only)
    """

    kind: OutcomeKind
    input_path: Path
    output_path: Path
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def skipped(cls, discovered: DiscoveredFile, reason: str) -> "BuildOutcome":
        return cls(OutcomeKind.SKIPPED, discovered.input_path, discovered.mapped_output_path, reason=reason)

    @classmethod
    def regenerated(cls, discovered: DiscoveredFile) -> "BuildOutcome":
        return cls(OutcomeKind.REGENERATED, discovered.input_path, discovered.mapped_output_path)

    @classmethod
    def failed(cls, discovered: DiscoveredFile, error: Exception) -> "BuildOutcome":
        return cls(OutcomeKind.FAILED, discovered.input_path, discovered.mapped_output_path, error=error)


class BuildDriver:
    """Runs grammar files through staleness checks and the compiler.

    One driver serves one run; its session is never modified.

    Attributes:
        session: Finalized settings for this run
        outcomes: Outcomes recorded so far, in processing order
    """

    def __init__(
        self,
        session: Session,
        compiler: CompilerLike,
        build_log: Optional[BuildLog] = None,
        directive_stream: Optional[TextIO] = None,
        on_outcome: Optional[Callable[[BuildOutcome], None]] = None,
    ):
        """Initialize the driver.

        Args:
            session: Finalized session (out_dir must be set)
            compiler: GrammarCompiler or function compiling one grammar
            build_log: User-facing log (defaults to one built from the session)
            directive_stream: Where rerun directives go (defaults to stdout)
            on_outcome: Called with each outcome as soon as it is recorded
        """
        self.session = session
        self.compiler = as_compiler(compiler)
        self.build_log = build_log if build_log is not None else BuildLog.for_session(session)
        self.mapper = PathMapper(session)
        self.checker = StalenessChecker(session)
        self.directives = DirectiveEmitter(session.emit_rerun_directives, directive_stream)
        self.on_outcome = on_outcome
        self.outcomes: List[BuildOutcome] = []

    def _record(self, outcome: BuildOutcome) -> BuildOutcome:
        self.outcomes.append(outcome)
        if self.on_outcome is not None:
            self.on_outcome(outcome)
        return outcome

    def discover(self, root: Union[str, Path]) -> List[DiscoveredFile]:
        """Find grammar files under root and map each to its output path."""
        paths = discover_grammar_files(root, self.session.source_extension)
        return [self.mapper.discovered(path) for path in paths]

    def process_discovered(self, discovered: DiscoveredFile) -> BuildOutcome:
        """Apply the per-file state machine to one grammar.

        Raises:
            GrammarBuildError: If the output directory cannot be created or
                the compiler fails. Build errors are re-raised unchanged; a
                bare OSError from the compiler is wrapped as BuildIOError
        """
        # Watch the grammar on every run, since a skip today may be a rebuild tomorrow
        self.directives.rerun_if_changed(discovered.input_path)

        decision = self.checker.check(discovered.input_path, discovered.mapped_output_path)
        if not decision.stale:
            self.build_log.log_detail(f"skipping `{discovered.input_path}`: {decision.reason}", indent=0, level=LogLevel.VERBOSE)
            return self._record(BuildOutcome.skipped(discovered, decision.reason))

        try:
            with self.build_log.timed(f"processing file `{discovered.input_path}`"):
                self.mapper.ensure_parent(discovered.mapped_output_path)
                self.compiler.compile(self.session, discovered.input_path, discovered.mapped_output_path)
        except GrammarBuildError as e:
            self._record(BuildOutcome.failed(discovered, e))
            raise
        except OSError as e:
            error = BuildIOError(discovered.input_path, e)
            self._record(BuildOutcome.failed(discovered, error))
            raise error from e
        except Exception as e:
            self._record(BuildOutcome.failed(discovered, e))
            raise

        logger.debug(f"Regenerated {discovered.mapped_output_path} ({decision.reason})")
        return self._record(BuildOutcome.regenerated(discovered))

    def process_file(self, input_path: Union[str, Path]) -> BuildOutcome:
        """Process a single grammar file."""
        return self.process_discovered(self.mapper.discovered(Path(input_path)))

    def process_dir(self, root: Union[str, Path]) -> List[BuildOutcome]:
        """Process every grammar under root, stopping at the first failure.

        Returns:
            Outcomes for this directory, in traversal order

        Raises:
            GrammarBuildError: On discovery, directory creation or compile failure
        """
        discovered_files = self.discover(root)
        logger.debug(f"Processing {len(discovered_files)} grammar file(s) under {root}")
        if not discovered_files:
            self.build_log.log_warning(f"no `*{self.session.source_extension}` files found under `{root}`")

        results = [self.process_discovered(discovered) for discovered in discovered_files]

        regenerated = sum(1 for outcome in results if outcome.kind is OutcomeKind.REGENERATED)
        self.build_log.log_summary(regenerated, len(results) - regenerated)
        return results
