"""Tests for input to output path mapping."""

import os
import sys
from pathlib import Path

import pytest

from gbuild.build.path_mapper import PathMapper
from gbuild.errors import BuildIOError
from gbuild.session import Session


def mapper(in_dir, out_dir, **kwargs) -> PathMapper:
    return PathMapper(Session(in_dir=None if in_dir is None else Path(in_dir), out_dir=Path(out_dir), **kwargs))


class TestPathMapper:
    """Mapping grammar paths under in_dir onto out_dir."""

    def test_mirrors_relative_structure(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("a", "target", source_extension=".g")

        assert m.output_path(Path("a/one.g")) == Path("target/one.rs")
        assert m.output_path(Path("a/b/two.g")) == Path("target/b/two.rs")

    def test_in_source_tree_only_changes_extension(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper(".", ".", source_extension=".g")
        assert m.output_path(Path("foo/bar.g")) == Path("foo/bar.rs")

    def test_default_in_dir_is_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper(None, "gen")
        assert m.output_path(Path("src/calc.lalrpop")) == Path("gen/src/calc.rs")

    def test_absolute_input_under_relative_in_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("src", "gen")
        assert m.output_path(tmp_path / "src" / "calc.lalrpop") == Path("gen/calc.rs")

    def test_input_outside_in_dir_generates_in_place(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("src", "gen")
        assert m.output_path(Path("elsewhere/calc.lalrpop")) == Path("elsewhere/calc.rs")

    def test_custom_generated_extension(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("src", "gen", generated_extension=".py")
        assert m.output_path(Path("src/calc.lalrpop")) == Path("gen/calc.py")

    def test_multi_dot_names_keep_inner_dots(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("src", "gen")
        assert m.output_path(Path("src/calc.v2.lalrpop")) == Path("gen/calc.v2.rs")

    def test_report_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        m = mapper("src", "gen")
        assert m.report_path(Path("src/x/calc.lalrpop")) == Path("gen/x/calc.report")

    def test_discovered(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        discovered = mapper("a", "target", source_extension=".g").discovered(Path("a/b/two.g"))

        assert discovered.input_path == Path("a/b/two.g")
        assert discovered.relative_path == Path("b/two.g")
        assert discovered.mapped_output_path == Path("target/b/two.rs")

    def test_unfinalized_session_rejected(self):
        with pytest.raises(RuntimeError):
            PathMapper(Session())


class TestEnsureParent:
    """Creation of missing output directories."""

    def test_creates_missing_directories(self, tmp_path):
        output = tmp_path / "target" / "b" / "two.rs"
        PathMapper.ensure_parent(output)
        assert output.parent.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        PathMapper.ensure_parent(tmp_path / "two.rs")

    def test_failure_is_build_io_error(self, tmp_path):
        blocker = tmp_path / "target"
        blocker.write_text("not a directory")
        with pytest.raises(BuildIOError) as excinfo:
            PathMapper.ensure_parent(blocker / "b" / "two.rs")
        assert isinstance(excinfo.value.cause, OSError)
