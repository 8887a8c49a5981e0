#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
In-memory folder tree for the Folder Uploader.

Nodes are stored flat in an id -> TreeNode mapping and reference each other by
id, so the structure serializes without cycles.
"""

import inspect
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Pattern, Union

from ..models.tree_node import NodeType, TreeNode, node_id_for
from ..utils.format import format_file_size

NodeCallback = Callable[[TreeNode], Any]
NodeMatcher = Union[str, Pattern, Callable[[TreeNode], bool]]


@dataclass
class TreeStats:
    total_nodes: int
    file_count: int
    directory_count: int
    total_size: int

    @property
    def total_size_human(self) -> str:
        return format_file_size(self.total_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_nodes": self.total_nodes,
            "file_count": self.file_count,
            "directory_count": self.directory_count,
            "total_size": self.total_size,
            "total_size_human": self.total_size_human,
        }


class FolderTree:
    """Id-indexed tree mirroring a directory subtree."""

    def __init__(self):
        self._nodes: Dict[str, TreeNode] = {}
        self._root_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def root_id(self) -> Optional[str]:
        return self._root_id

    # ------------------------------------------------------------------
    # Construction (used by TreeBuilder)
    # ------------------------------------------------------------------

    def add_node(self, name: str, absolute_path: str, relative_path: str, kind: NodeType,
                 extension: Optional[str] = None, size_bytes: Optional[int] = None,
                 parent_id: Optional[str] = None) -> TreeNode:
        """Add a node and link it under its parent. A node without parent becomes the root."""
        node = TreeNode(
            id=node_id_for(absolute_path),
            name=name,
            absolute_path=absolute_path,
            relative_path=relative_path,
            kind=kind,
            extension=extension if kind == NodeType.FILE else None,
            size_bytes=size_bytes if kind == NodeType.FILE else None,
            parent_id=parent_id,
        )
        self._nodes[node.id] = node

        if parent_id is None:
            self._root_id = node.id
        else:
            parent = self._nodes.get(parent_id)
            if parent is None:
                raise KeyError(f"Unknown parent id {parent_id}")
            if node.id not in parent.children_ids:
                parent.children_ids.append(node.id)
        return node

    def sort_children(self, node: TreeNode) -> None:
        """Directories first, then files, each group by name."""
        children = self.get_children(node)
        children.sort(key=lambda c: (c.kind != NodeType.DIRECTORY, c.name.casefold(), c.name))
        node.children_ids = [c.id for c in children]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[TreeNode]:
        return self._nodes.get(node_id)

    def get_root(self) -> Optional[TreeNode]:
        return self._nodes.get(self._root_id) if self._root_id else None

    def get_all_nodes(self) -> List[TreeNode]:
        return list(self._nodes.values())

    def get_parent(self, node: TreeNode) -> Optional[TreeNode]:
        return self._nodes.get(node.parent_id) if node.parent_id else None

    def get_children(self, node: TreeNode) -> List[TreeNode]:
        return [self._nodes[cid] for cid in node.children_ids if cid in self._nodes]

    def get_path(self, node: TreeNode) -> List[TreeNode]:
        """Nodes from the root down to ``node`` inclusive."""
        path = []
        current: Optional[TreeNode] = node
        while current is not None:
            path.append(current)
            current = self.get_parent(current)
        path.reverse()
        return path

    def get_depth(self, node: TreeNode) -> int:
        """Root is depth 0."""
        return len(self.get_path(node)) - 1

    def walk(self, start: Optional[TreeNode] = None) -> Iterator[TreeNode]:
        """Pre-order traversal: each node before its children, children in stored order."""
        root = start or self.get_root()
        if root is None:
            raise ValueError("No tree has been created or no start node provided")

        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(self.get_children(node)))

    def for_each(self, callback: NodeCallback, start: Optional[TreeNode] = None) -> None:
        for node in self.walk(start):
            callback(node)

    async def for_each_async(self, callback: NodeCallback, start: Optional[TreeNode] = None) -> None:
        """Like for_each, awaiting the callback's result before visiting the next node."""
        for node in self.walk(start):
            result = callback(node)
            if inspect.isawaitable(result):
                await result

    def iter_files(self) -> Iterator[TreeNode]:
        """File nodes in traversal order."""
        return (node for node in self.walk() if node.is_file)

    def find(self, matcher: NodeMatcher) -> List[TreeNode]:
        """
        Find nodes by predicate or name pattern.

        A string is compiled as a case-insensitive regular expression and
        searched in each node name.
        """
        if isinstance(matcher, str):
            matcher = re.compile(matcher, re.IGNORECASE)
        if isinstance(matcher, re.Pattern):
            pattern = matcher
            predicate = lambda node: pattern.search(node.name) is not None
        else:
            predicate = matcher
        return [node for node in self.walk() if predicate(node)]

    def files_by_extension(self, extension: str) -> List[TreeNode]:
        """Files whose extension matches, with or without leading dot, case-insensitive."""
        wanted = extension.lstrip(".").lower()
        return [
            node for node in self.walk()
            if node.is_file and (node.extension or "").lower() == wanted
        ]

    def stats(self) -> TreeStats:
        file_count = 0
        directory_count = 0
        total_size = 0
        for node in self._nodes.values():
            if node.is_file:
                file_count += 1
                total_size += node.size_bytes or 0
            else:
                directory_count += 1
        return TreeStats(
            total_nodes=len(self._nodes),
            file_count=file_count,
            directory_count=directory_count,
            total_size=total_size,
        )

    def render(self, start: Optional[TreeNode] = None) -> List[str]:
        """Indented listing, one line per node."""
        root = start or self.get_root()
        if root is None:
            return []
        base_depth = self.get_depth(root)
        lines = []
        for node in self.walk(root):
            indent = "  " * (self.get_depth(node) - base_depth)
            if node.is_directory:
                lines.append(f"{indent}{node.name}/")
            else:
                lines.append(f"{indent}{node.name} ({format_file_size(node.size_bytes or 0)})")
        return lines

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_portable(self) -> Dict[str, Any]:
        return {
            "root_id": self._root_id,
            "nodes": {node_id: node.to_dict() for node_id, node in self._nodes.items()},
        }

    @classmethod
    def from_portable(cls, data: Dict[str, Any]) -> 'FolderTree':
        tree = cls()
        tree._nodes = {
            node_id: TreeNode.from_dict(node_data)
            for node_id, node_data in (data.get("nodes") or {}).items()
        }
        root_id = data.get("root_id")
        if root_id is not None and root_id not in tree._nodes:
            raise ValueError(f"Root id {root_id} is not among the nodes")
        tree._root_id = root_id
        return tree

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_portable(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> 'FolderTree':
        return cls.from_portable(json.loads(text))
