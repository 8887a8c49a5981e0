"""Folder tree construction and traversal."""

from .folder_tree import FolderTree, TreeStats
from .builder import TreeBuilder, build_tree

__all__ = ['FolderTree', 'TreeStats', 'TreeBuilder', 'build_tree']
