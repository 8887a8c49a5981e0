"""Data models for the Folder Uploader."""

from .tree_node import TreeNode, NodeType
from .checkpoint import UploadCheckpoint, CheckpointParams, CheckpointStats
from .outcome import FileKind, FileOutcome, RunSummary

__all__ = [
    'TreeNode', 'NodeType',
    'UploadCheckpoint', 'CheckpointParams', 'CheckpointStats',
    'FileKind', 'FileOutcome', 'RunSummary',
]
