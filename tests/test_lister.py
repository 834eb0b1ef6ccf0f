"""Tests for directory listing — entries, links, parent navigation."""

import os

import pytest

from treeserve.services.lister import (
    build_link,
    escape_segments,
    list_directory,
    parent_link,
)
from treeserve.services.path_resolver import TraversalError


class TestListDirectory:
    def test_root_listing(self, served_root):
        listing = list_directory(str(served_root), "")
        assert listing.current_path == ""
        assert listing.has_parent is False
        assert listing.parent_path == ""

        by_name = {e.name: e for e in listing.entries}
        assert set(by_name) == {"a.txt", "b"}
        assert by_name["a.txt"].size == 10
        assert by_name["a.txt"].is_dir is False
        assert by_name["a.txt"].link_path == "/files/a.txt"
        assert by_name["b"].is_dir is True
        assert by_name["b"].link_path == "/browse/b"
        assert by_name["b"].mode.startswith("d")
        assert by_name["a.txt"].mode.startswith("-")
        assert by_name["a.txt"].modified_at.tzinfo is not None

    def test_every_entry_gets_a_link(self, tmp_path):
        for i in range(5):
            (tmp_path / f"f{i}.bin").write_bytes(b"x" * i)
        for i in range(3):
            (tmp_path / f"d{i}").mkdir()

        listing = list_directory(str(tmp_path), ".")
        assert len(listing.entries) == 8
        for entry in listing.entries:
            prefix = "/browse/" if entry.is_dir else "/files/"
            assert entry.link_path.startswith(prefix)
            assert len(entry.link_path) > len(prefix)

    def test_single_level_only(self, served_root):
        (served_root / "b" / "nested.txt").write_text("hi")
        names = [e.name for e in list_directory(str(served_root), "").entries]
        assert "nested.txt" not in names

    def test_empty_subdirectory(self, served_root):
        listing = list_directory(str(served_root), "b")
        assert listing.entries == []
        assert listing.has_parent is True
        assert listing.parent_path == "/browse/"
        assert listing.current_path == "b"

    def test_nested_links_carry_the_directory(self, served_root):
        (served_root / "b" / "c").mkdir()
        (served_root / "b" / "song one.mp3").write_bytes(b"id3")
        listing = list_directory(str(served_root), "b/")
        links = {e.name: e.link_path for e in listing.entries}
        assert links["c"] == "/browse/b/c"
        assert links["song one.mp3"] == "/files/b/song%20one.mp3"

    def test_unreadable_entry_is_skipped(self, served_root):
        os.symlink(served_root / "missing-target", served_root / "dangling")
        names = {e.name for e in list_directory(str(served_root), "").entries}
        assert names == {"a.txt", "b"}

    def test_traversal_propagates(self, served_root):
        with pytest.raises(TraversalError):
            list_directory(str(served_root), "../")

    def test_missing_directory_raises_oserror(self, served_root):
        with pytest.raises(OSError):
            list_directory(str(served_root), "nope")

    def test_file_instead_of_directory_raises_oserror(self, served_root):
        with pytest.raises(OSError):
            list_directory(str(served_root), "a.txt")


class TestLinks:
    def test_segments_escaped_independently(self):
        assert escape_segments("my dir/sub#1") == "my%20dir/sub%231"

    def test_slash_like_characters_in_name_are_escaped(self):
        assert build_link("", "a/b", is_dir=False) == "/files/a%2Fb"

    def test_nested_build(self):
        assert build_link("x y/z", "f?.txt", is_dir=False) == "/files/x%20y/z/f%3F.txt"
        assert build_link("x", "d", is_dir=True) == "/browse/x/d"

    def test_parent_of_root(self):
        assert parent_link("") == ("", False)

    def test_parent_of_one_level(self):
        assert parent_link("a") == ("/browse/", True)

    def test_parent_of_deeper_path(self):
        assert parent_link("a b/c/d") == ("/browse/a%20b/c", True)
