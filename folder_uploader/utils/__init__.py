"""Utility functions for the Folder Uploader."""

from .time import utc_now_str, now_iso
from .path import ensure_dir
from .format import format_file_size

__all__ = ['utc_now_str', 'now_iso', 'ensure_dir', 'format_file_size']
