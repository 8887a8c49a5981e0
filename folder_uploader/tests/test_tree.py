#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for folder tree construction and traversal.
"""

import asyncio
import os
import re
from unittest.mock import patch

import pytest

from folder_uploader.errors import NotADirectory, PathNotFound
from folder_uploader.models.tree_node import NodeType
from folder_uploader.tree.builder import TreeBuilder, build_tree
from folder_uploader.tree.folder_tree import FolderTree
from folder_uploader.tests.fixtures.tree_setup import (
    CATEGORY, EXPECTED_DIRECTORY_COUNT, EXPECTED_FILE_ORDER, create_test_tree
)


class TestTreeFixture:
    """Test fixture that provides a freshly built tree for each test."""

    @pytest.fixture
    def source(self, tmp_path):
        return create_test_tree(tmp_path)

    @pytest.fixture
    def tree(self, source):
        return build_tree(source)


class TestTreeConstruction(TestTreeFixture):
    """Shape of a freshly built tree."""

    def test_stats_count_every_node(self, tree):
        stats = tree.stats()
        assert stats.file_count == len(EXPECTED_FILE_ORDER)
        assert stats.directory_count == EXPECTED_DIRECTORY_COUNT
        assert stats.total_nodes == stats.file_count + stats.directory_count
        assert stats.total_size == sum(100 * (i + 1) for i in range(len(EXPECTED_FILE_ORDER)))

    def test_single_root(self, tree):
        roots = [n for n in tree.get_all_nodes() if n.parent_id is None]
        assert len(roots) == 1
        assert roots[0] is tree.get_root()
        assert roots[0].name == CATEGORY
        assert roots[0].relative_path == "."

    def test_children_link_back_to_parent(self, tree):
        for node in tree.get_all_nodes():
            for child_id in node.children_ids:
                child = tree.get_node(child_id)
                assert child is not None
                assert child.parent_id == node.id
            if node.is_file:
                assert node.children_ids == []

    def test_hidden_entries_are_skipped(self, tree):
        names = {n.name for n in tree.get_all_nodes()}
        assert ".hidden_file" not in names
        assert ".git" not in names
        assert ".DS_Store" not in names
        assert "config" not in names

    def test_directories_before_files_alphabetically(self, tree):
        for node in tree.get_all_nodes():
            children = tree.get_children(node)
            kinds = [c.kind for c in children]
            dirs = [c.name for c in children if c.kind == NodeType.DIRECTORY]
            files = [c.name for c in children if c.kind == NodeType.FILE]
            assert kinds == sorted(kinds, key=lambda k: k != NodeType.DIRECTORY)
            assert dirs == sorted(dirs)
            assert files == sorted(files)

    def test_file_order_is_deterministic(self, tree, source):
        assert [n.relative_path for n in tree.iter_files()] == EXPECTED_FILE_ORDER
        rebuilt = build_tree(source)
        assert [n.id for n in rebuilt.walk()] == [n.id for n in tree.walk()]

    def test_file_metadata(self, tree):
        notes = tree.find("^notes")[0]
        assert notes.kind == NodeType.FILE
        assert notes.extension == "txt"
        assert notes.size_bytes == 500
        folder = tree.find("outro curso")[0]
        assert folder.extension is None
        assert folder.size_bytes is None

    def test_ids_are_path_derived(self, tree):
        ids = [n.id for n in tree.get_all_nodes()]
        assert len(ids) == len(set(ids))
        assert all(len(i) == 32 for i in ids)


class TestTreeQueries(TestTreeFixture):
    """Traversal and lookup operations."""

    def test_path_and_depth(self, tree):
        leaf = next(tree.iter_files())
        path = tree.get_path(leaf)
        assert [n.name for n in path] == [
            CATEGORY, "001 - curso docker", "001 - aula de docker", "001 - Nome da aula 1.mp4"
        ]
        assert tree.get_depth(leaf) == 3
        assert tree.get_depth(tree.get_root()) == 0
        assert tree.get_parent(tree.get_root()) is None

    def test_for_each_is_pre_order(self, tree):
        visited = []
        tree.for_each(visited.append)
        seen = set()
        for node in visited:
            if node.parent_id is not None:
                assert node.parent_id in seen
            seen.add(node.id)
        assert len(visited) == len(tree)

    def test_for_each_async_awaits_each_visit(self, tree):
        visited = []

        async def visit(node):
            await asyncio.sleep(0)
            visited.append(node.id)

        asyncio.run(tree.for_each_async(visit))
        assert visited == [n.id for n in tree.walk()]

    def test_find_by_pattern_and_predicate(self, tree):
        assert len(tree.find("nome da aula")) == 4
        assert len(tree.find(re.compile(r"^00\d - aula"))) == 3
        big = tree.find(lambda n: n.is_file and n.size_bytes >= 400)
        assert sorted(n.name for n in big) == ["001 - Nome da aula 1.mp4", "notes.txt"]

    def test_files_by_extension(self, tree):
        assert len(tree.files_by_extension("mp4")) == 4
        assert len(tree.files_by_extension(".MP4")) == 4
        assert [n.name for n in tree.files_by_extension("txt")] == ["notes.txt"]
        assert tree.files_by_extension("mkv") == []

    def test_walk_on_empty_tree_raises(self):
        with pytest.raises(ValueError):
            list(FolderTree().walk())

    def test_render_lists_every_node(self, tree):
        lines = tree.render()
        assert len(lines) == len(tree)
        assert lines[0] == f"{CATEGORY}/"
        assert lines[-1].startswith("  notes.txt")


class TestTreeSerialization(TestTreeFixture):
    """Portable representation round trips."""

    def test_portable_round_trip(self, tree):
        restored = FolderTree.from_portable(tree.to_portable())
        assert len(restored) == len(tree)
        assert restored.get_root().name == tree.get_root().name
        for node in tree.get_all_nodes():
            copy = restored.get_node(node.id)
            assert copy == node
            assert restored.get_depth(copy) == tree.get_depth(node)

    def test_json_round_trip(self, tree):
        restored = FolderTree.from_json(tree.to_json())
        assert [n.relative_path for n in restored.iter_files()] == EXPECTED_FILE_ORDER

    def test_unknown_root_is_rejected(self, tree):
        data = tree.to_portable()
        data["root_id"] = "missing"
        with pytest.raises(ValueError):
            FolderTree.from_portable(data)


class TestTreeErrors:
    """Failure handling during construction."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(PathNotFound):
            build_tree(tmp_path / "nope")

    def test_file_instead_of_directory(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("hello")
        with pytest.raises(NotADirectory):
            build_tree(f)

    def test_empty_directory(self, tmp_path):
        tree = build_tree(tmp_path)
        assert len(tree) == 1
        assert list(tree.iter_files()) == []

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                        reason="permission checks do not apply to root")
    def test_unreadable_directory_is_kept_without_children(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "inside.txt").write_text("x")
        (tmp_path / "open.txt").write_text("y")
        locked.chmod(0)
        try:
            builder = TreeBuilder()
            tree = builder.build(tmp_path)
        finally:
            locked.chmod(0o755)

        node = tree.find("^locked$")[0]
        assert node.is_directory
        assert node.children_ids == []
        assert [n.name for n in tree.iter_files()] == ["open.txt"]
        assert builder.stats['permission_errors'] == 1

    def test_scan_error_on_one_directory(self, tmp_path):
        """Test that a directory failing to list does not stop the walk."""
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "inside.txt").write_text("x")
        (tmp_path / "open.txt").write_text("y")
        real_scandir = os.scandir

        def scandir(path):
            if os.path.basename(os.fspath(path)) == "locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        builder = TreeBuilder()
        with patch("folder_uploader.tree.builder.os.scandir", side_effect=scandir):
            tree = builder.build(tmp_path)

        node = tree.find("^locked$")[0]
        assert node.is_directory
        assert node.children_ids == []
        assert [n.name for n in tree.iter_files()] == ["open.txt"]
        assert builder.stats['permission_errors'] == 1
