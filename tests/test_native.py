"""
Tests for native library discovery, plus integration tests that run
against a real libmecab when one is installed.
"""

from unittest.mock import patch

import pytest

from kaiseki import Analyzer, is_available
from kaiseki._native import (
    LIBRARY_ENV,
    MeCabNode,
    find_library_path,
    load_library,
)
from kaiseki.exceptions import ConstructionError, LibraryNotFoundError


class TestLibraryDiscovery:
    """Tests for locating and loading libmecab."""

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv(LIBRARY_ENV, "/opt/mecab/lib/libmecab.so.2")
        assert find_library_path() == "/opt/mecab/lib/libmecab.so.2"

    def test_find_library_fallback(self, monkeypatch):
        monkeypatch.delenv(LIBRARY_ENV, raising=False)
        with patch("kaiseki._native.ctypes.util.find_library", return_value="libmecab.so.2"):
            assert find_library_path() == "libmecab.so.2"

    def test_missing_library(self, monkeypatch):
        monkeypatch.delenv(LIBRARY_ENV, raising=False)
        with patch("kaiseki._native.ctypes.util.find_library", return_value=None):
            with pytest.raises(LibraryNotFoundError, match=LIBRARY_ENV):
                load_library()

    def test_unloadable_library(self):
        with pytest.raises(LibraryNotFoundError, match="Could not load"):
            load_library("/nonexistent/libmecab.so")

    def test_library_error_is_construction_error(self):
        assert issubclass(LibraryNotFoundError, ConstructionError)

    def test_is_available_false(self):
        with patch("kaiseki._native.load_library", side_effect=LibraryNotFoundError("x")):
            assert is_available() is False

    def test_node_struct_mirrors_header(self):
        names = [name for name, _ in MeCabNode._fields_]
        assert names == [
            "prev", "next", "enext", "bnext", "rpath", "lpath", "surface",
            "feature", "id", "length", "rlength", "rcAttr", "lcAttr", "posid",
            "char_type", "stat", "isbest", "alpha", "beta", "prob", "wcost",
            "cost",
        ]


def _real_analyzer(**options):
    if not is_available():
        pytest.skip("libmecab is not installed")
    try:
        return Analyzer(**options)
    except ConstructionError as e:
        pytest.skip(f"MeCab is installed but not usable: {e}")


class TestRealMeCab:
    """Integration tests against the installed libmecab."""

    def test_surfaces_cover_input(self):
        with _real_analyzer() as analyzer:
            view = analyzer.parse("hello world")
            assert "".join(view.surfaces()) == "helloworld"
            assert list(view)[-1].is_eos

    def test_empty_input(self):
        with _real_analyzer() as analyzer:
            assert analyzer.parse("").head().is_eos

    def test_clone_round_trip(self):
        with _real_analyzer() as analyzer:
            view = analyzer.parse("すもももももももものうち")
            original = [node.to_dict() for node in view]
            result = view.clone()
        assert [node.to_dict() for node in result] == original

    def test_user_format(self):
        with _real_analyzer(
            output_format_type="user", node_format="%m\\n", unk_format="%m\\n"
        ) as analyzer:
            view = analyzer.parse("hello")
            rendered = "".join(node.format() for node in view.morphemes())
            assert rendered == "".join(s + "\n" for s in view.surfaces())
