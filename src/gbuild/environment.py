"""Build-script environment access.

Cargo communicates with build scripts through environment variables:
OUT_DIR names the directory generated files belong in, and one
CARGO_FEATURE_<NAME> variable is set per enabled feature. This module
reads them through an injectable Environment so that finalization can be
tested without touching os.environ.
"""

import os
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol

OUT_DIR_VAR = "OUT_DIR"
FEATURE_PREFIX = "CARGO_FEATURE_"


class Environment(Protocol):
    """Read-only view of environment variables."""

    def get(self, name: str) -> Optional[str]: ...

    def names(self) -> Iterable[str]: ...


class ProcessEnvironment:
    """Environment backed by os.environ, read at call time."""

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name)

    def names(self) -> Iterable[str]:
        return list(os.environ.keys())


class MappingEnvironment:
    """Environment backed by a fixed mapping."""

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self._variables = dict(variables or {})

    def get(self, name: str) -> Optional[str]:
        return self._variables.get(name)

    def names(self) -> Iterable[str]:
        return list(self._variables.keys())


def resolve_out_dir(env: Environment) -> Optional[Path]:
    """Return the output root named by OUT_DIR, or None when it is unset."""
    value = env.get(OUT_DIR_VAR)
    if value is None:
        return None
    return Path(value)


def feature_name(variable: str) -> Optional[str]:
    """Translate a CARGO_FEATURE_* variable name into a feature name.

    CARGO_FEATURE_FOO_BAR becomes "foo-bar". Variables without the prefix
    return None.
    """
    if not variable.startswith(FEATURE_PREFIX):
        return None
    return variable[len(FEATURE_PREFIX) :].replace("_", "-").lower()


def resolve_features(env: Environment) -> frozenset[str]:
    """Collect the feature set from CARGO_FEATURE_* variables.

    Only variable names matter; values are ignored.
    """
    features = set()
    for variable in env.names():
        name = feature_name(variable)
        if name:
            features.add(name)
    return frozenset(features)
