"""Tests for environment-derived defaults (OUT_DIR and CARGO_FEATURE_*)."""

from pathlib import Path

from gbuild.environment import (
    FEATURE_PREFIX,
    MappingEnvironment,
    ProcessEnvironment,
    feature_name,
    resolve_features,
    resolve_out_dir,
)


def test_feature_name_strips_prefix_and_normalizes():
    """CARGO_FEATURE_FOO_BAR becomes foo-bar."""
    assert feature_name("CARGO_FEATURE_FOO_BAR") == "foo-bar"
    assert feature_name("CARGO_FEATURE_BAZ") == "baz"


def test_feature_name_ignores_other_variables():
    assert feature_name("PATH") is None
    assert feature_name("XCARGO_FEATURE_FOO") is None


def test_resolve_features_collects_prefixed_variables():
    """Values are ignored; only variable names matter."""
    env = MappingEnvironment(
        {
            "CARGO_FEATURE_FOO_BAR": "1",
            "CARGO_FEATURE_BAZ": "",
            "CARGO_PKG_NAME": "demo",
            "HOME": "/home/demo",
        }
    )
    assert resolve_features(env) == frozenset({"foo-bar", "baz"})


def test_resolve_features_empty_environment():
    assert resolve_features(MappingEnvironment()) == frozenset()


def test_resolve_features_skips_bare_prefix():
    env = MappingEnvironment({FEATURE_PREFIX: "1"})
    assert resolve_features(env) == frozenset()


def test_resolve_out_dir():
    assert resolve_out_dir(MappingEnvironment({"OUT_DIR": "/tmp/out"})) == Path("/tmp/out")
    assert resolve_out_dir(MappingEnvironment()) is None


def test_process_environment_reads_os_environ(monkeypatch):
    """ProcessEnvironment sees changes made after it was created."""
    env = ProcessEnvironment()
    monkeypatch.setenv("CARGO_FEATURE_LATE_ADDITION", "1")
    monkeypatch.setenv("OUT_DIR", "/somewhere")
    assert "late-addition" in resolve_features(env)
    assert resolve_out_dir(env) == Path("/somewhere")

    monkeypatch.delenv("OUT_DIR")
    assert resolve_out_dir(env) is None
