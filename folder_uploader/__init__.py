"""Folder Uploader - resumable folder uploads to Telegram forum topics."""

__version__ = "1.0.0"
__author__ = "Folder Uploader Team"

# Import key classes for convenient top-level access
from .checkpoint import CheckpointStore
from .tree import FolderTree, TreeBuilder, build_tree
from .upload import UploadOrchestrator
from .transport import TelegramUploader, UploadReceipt
from .models import TreeNode, NodeType, UploadCheckpoint, FileOutcome, FileKind, RunSummary
from .tagging import derive_tags, format_hashtag
from .config import RateLimitConfig, load_settings

__all__ = [
    # Core classes
    'CheckpointStore',
    'FolderTree',
    'TreeBuilder',
    'UploadOrchestrator',
    'TelegramUploader',

    # Data models
    'TreeNode',
    'NodeType',
    'UploadCheckpoint',
    'FileOutcome',
    'FileKind',
    'RunSummary',
    'UploadReceipt',

    # Functions
    'build_tree',
    'derive_tags',
    'format_hashtag',
    'load_settings',
    'RateLimitConfig',

    # Package metadata
    '__version__',
    '__author__'
]
