"""CLI command implementations."""

from .upload import UploadCommand
from .checkpoint import cmd_list_checkpoints, cmd_cleanup_checkpoints, cmd_checkpoint_info
from .tree import cmd_show_tree

__all__ = [
    'UploadCommand',
    'cmd_list_checkpoints',
    'cmd_cleanup_checkpoints',
    'cmd_checkpoint_info',
    'cmd_show_tree',
]
