"""Tests for segment discovery and ordering."""

import re
import warnings
from pathlib import Path

import pytest

from zipsplit.core.model import InvalidTerminalSegmentError
from zipsplit.discovery import DirectorySiblingLister, discover_segments, order_segments


class StaticSiblingLister:
    """Serve sibling names from a fixed list instead of the file system."""

    def __init__(self, names):
        self.names = list(names)
        self.calls = 0

    def list_siblings(self, path: Path, pattern: re.Pattern):
        self.calls += 1
        return [path.parent / n for n in self.names if n != path.name and pattern.fullmatch(n)]


class TestOrdering:
    """Test numeric ordering of split parts."""

    def test_numeric_not_lexicographic(self, tmp_path):
        lister = StaticSiblingLister(["foo.z1", "foo.z9", "foo.z10", "foo.z2"])

        with pytest.warns(UserWarning, match="not contiguous"):
            paths = discover_segments(tmp_path / "foo.zip", lister=lister)

        assert [p.name for p in paths] == ["foo.z1", "foo.z2", "foo.z9", "foo.z10", "foo.zip"]

    def test_zero_padded_parts(self, tmp_path):
        names = [f"foo.z{i:02d}" for i in (3, 1, 10, 2, 4, 5, 6, 7, 8, 9)]
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            paths = discover_segments(tmp_path / "foo.zip", lister=StaticSiblingLister(names))

        assert [p.name for p in paths][:3] == ["foo.z01", "foo.z02", "foo.z03"]
        assert paths[-2].name == "foo.z10"
        assert paths[-1].name == "foo.zip"

    def test_equal_numbers_ordered_by_name(self):
        paths = order_segments([Path("foo.z1"), Path("foo.z01"), Path("foo.z2")])
        assert [p.name for p in paths] == ["foo.z01", "foo.z1", "foo.z2"]


class TestDiscovery:
    """Test terminal path handling."""

    def test_wrong_extension_fails_before_listing(self, tmp_path):
        lister = StaticSiblingLister(["foo.z01"])

        with pytest.raises(InvalidTerminalSegmentError, match=r"\.zip"):
            discover_segments(tmp_path / "foo.rar", lister=lister)

        assert lister.calls == 0

    def test_extension_is_case_sensitive(self, tmp_path):
        with pytest.raises(InvalidTerminalSegmentError):
            discover_segments(tmp_path / "foo.ZIP", lister=StaticSiblingLister([]))

    def test_no_siblings(self, tmp_path):
        paths = discover_segments(tmp_path / "foo.zip", lister=StaticSiblingLister([]))
        assert paths == [(tmp_path / "foo.zip").resolve()]

    def test_unrelated_names_ignored(self, tmp_path):
        lister = StaticSiblingLister(["foo.z01", "bar.z02", "foo.zip", "foo.z01.tmp", "foo.z", "xfoo.z02"])
        paths = discover_segments(tmp_path / "foo.zip", lister=lister)
        assert [p.name for p in paths] == ["foo.z01", "foo.zip"]

    def test_gap_in_numbering_warns(self, tmp_path):
        with pytest.warns(UserWarning):
            discover_segments(tmp_path / "foo.zip", lister=StaticSiblingLister(["foo.z01", "foo.z03"]))


class TestDirectorySiblingLister:
    """Test the directory backed lister."""

    def test_lists_matching_files(self, tmp_path):
        for name in ("foo.z01", "foo.z02", "foo.zip", "foo.txt", "bar.z01"):
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "foo.z03").mkdir()

        paths = discover_segments(tmp_path / "foo.zip")

        assert [p.name for p in paths] == ["foo.z01", "foo.z02", "foo.zip"]

    def test_excludes_terminal(self, tmp_path):
        (tmp_path / "foo.z01").write_bytes(b"x")
        terminal = tmp_path / "foo.zip"
        terminal.write_bytes(b"x")

        siblings = DirectorySiblingLister().list_siblings(terminal, re.compile(r".*"))

        assert terminal not in siblings
        assert tmp_path / "foo.z01" in siblings

    def test_unnumbered_names_from_lister_dropped(self, tmp_path):
        class LooseLister:
            def list_siblings(self, path, pattern):
                return [path.parent / "foo.z02", path.parent / "foo.bak", path.parent / "foo.z01"]

        paths = discover_segments(tmp_path / "foo.zip", lister=LooseLister())

        assert [p.name for p in paths] == ["foo.z01", "foo.z02", "foo.zip"]
