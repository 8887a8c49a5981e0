#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for folder tree nodes in the Folder Uploader.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


def node_id_for(absolute_path: str) -> str:
    """Content-addressed node id: the same path always yields the same id."""
    return hashlib.md5(absolute_path.encode("utf-8")).hexdigest()


@dataclass
class TreeNode:
    """A file or directory in a FolderTree, linked to others by id."""
    id: str
    name: str
    absolute_path: str
    relative_path: str
    kind: NodeType

    # Only set for files
    extension: Optional[str] = None
    size_bytes: Optional[int] = None

    parent_id: Optional[str] = None
    children_ids: List[str] = field(default_factory=list)

    @property
    def is_file(self) -> bool:
        return self.kind == NodeType.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeType.DIRECTORY

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "absolute_path": self.absolute_path,
            "relative_path": self.relative_path,
            "kind": self.kind.value,
            "extension": self.extension,
            "size_bytes": self.size_bytes,
            "parent_id": self.parent_id,
            "children_ids": list(self.children_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TreeNode':
        """Create node from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            absolute_path=data["absolute_path"],
            relative_path=data["relative_path"],
            kind=NodeType(data["kind"]),
            extension=data.get("extension"),
            size_bytes=data.get("size_bytes"),
            parent_id=data.get("parent_id"),
            children_ids=list(data.get("children_ids") or []),
        )
