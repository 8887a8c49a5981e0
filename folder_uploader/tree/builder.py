#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Folder tree construction for the Folder Uploader.
Walks a directory once, depth-first, and records every visible entry.
"""

import logging
import os
import time
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import NotADirectory, PathNotFound
from ..models.tree_node import NodeType, TreeNode
from ..utils.path import is_hidden
from .folder_tree import FolderTree

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds a FolderTree from the filesystem."""

    def __init__(self):
        self.stats: Dict[str, int] = {}

    def build(self, root_path: Union[str, Path]) -> FolderTree:
        """
        Create a tree for ``root_path``.

        Raises:
            PathNotFound: root_path does not exist
            NotADirectory: root_path is not a directory
        """
        root = Path(root_path).resolve()
        if not root.exists():
            raise PathNotFound(root_path)
        if not root.is_dir():
            raise NotADirectory(root_path)

        logger.info("Creating folder tree for path: %s", root)
        self.stats = {
            'total_scanned': 0,
            'permission_errors': 0,
            'skipped_hidden': 0,
            'skipped_other': 0,
        }
        start_time = time.perf_counter()

        tree = FolderTree()
        root_node = tree.add_node(
            name=root.name or str(root),
            absolute_path=str(root),
            relative_path=".",
            kind=NodeType.DIRECTORY,
        )
        self._scan_directory(tree, root_node, root)

        elapsed = time.perf_counter() - start_time
        summary = tree.stats()
        logger.info(
            "Tree created: %d nodes (%d files, %d directories) in %.2fs",
            summary.total_nodes, summary.file_count, summary.directory_count, elapsed,
        )
        if self.stats['permission_errors']:
            logger.warning("Unreadable entries skipped: %d", self.stats['permission_errors'])
        return tree

    def _scan_directory(self, tree: FolderTree, node: TreeNode, root: Path):
        """Add the children of ``node`` and recurse into subdirectories."""
        try:
            with os.scandir(node.absolute_path) as it:
                entries = list(it)
        except OSError as e:
            self.stats['permission_errors'] += 1
            logger.warning("Error reading directory %s: %s", node.absolute_path, e)
            return

        for entry in entries:
            self.stats['total_scanned'] += 1
            if is_hidden(entry.name):
                self.stats['skipped_hidden'] += 1
                continue

            try:
                child = self._add_entry(tree, node, entry, root)
            except OSError as e:
                self.stats['permission_errors'] += 1
                logger.warning("Cannot stat %s: %s", entry.path, e)
                continue

            if child is not None and child.is_directory:
                self._scan_directory(tree, child, root)

        tree.sort_children(node)

    def _add_entry(self, tree: FolderTree, parent: TreeNode, entry: os.DirEntry,
                   root: Path) -> Optional[TreeNode]:
        path = Path(entry.path)
        relative = path.relative_to(root).as_posix()

        # Symlinked directories are not followed so every node is visited once
        if entry.is_dir(follow_symlinks=False):
            return tree.add_node(
                name=entry.name,
                absolute_path=str(path),
                relative_path=relative,
                kind=NodeType.DIRECTORY,
                parent_id=parent.id,
            )

        if entry.is_file():
            return tree.add_node(
                name=entry.name,
                absolute_path=str(path),
                relative_path=relative,
                kind=NodeType.FILE,
                extension=file_extension(entry.name),
                size_bytes=entry.stat().st_size,
                parent_id=parent.id,
            )

        self.stats['skipped_other'] += 1
        logger.debug("Skipping non-regular entry %s", entry.path)
        return None


def file_extension(filename: str) -> Optional[str]:
    """Extension without the dot, or None."""
    suffix = Path(filename).suffix
    return suffix[1:] if suffix else None


def build_tree(root_path: Union[str, Path]) -> FolderTree:
    """Convenience function for one-off tree construction."""
    return TreeBuilder().build(root_path)
