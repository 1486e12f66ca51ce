"""Rerun directives for the host build tool.

Cargo reads `cargo:` lines from a build script's stdout. Printing
`cargo:rerun-if-changed=<path>` for every grammar tells Cargo to rerun the
build script when any of them changes.
"""

import sys
from pathlib import Path
from typing import Optional, TextIO

RERUN_IF_CHANGED = "cargo:rerun-if-changed="


class DirectiveEmitter:
    """Writes rerun directives to the build tool's channel."""

    def __init__(self, enabled: bool, stream: Optional[TextIO] = None):
        self.enabled = enabled
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so that stdout redirection after construction is honored
        return self._stream if self._stream is not None else sys.stdout

    def rerun_if_changed(self, path: Path) -> None:
        """Emit a watch directive for path, if directives are enabled."""
        if not self.enabled:
            return
        self.stream.write(f"{RERUN_IF_CHANGED}{path}\n")
        self.stream.flush()
