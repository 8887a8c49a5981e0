#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception hierarchy for the Folder Uploader.

Run-level conditions (PathNotFound, NotADirectory, UnmappedCategory) abort a
run before any file is processed. Per-file conditions (FileVanished,
TransferFailed) are recorded as failed outcomes and the batch continues.
"""


class UploaderError(Exception):
    """Base application error."""


class PathNotFound(UploaderError):
    """Source path does not exist."""

    def __init__(self, path):
        super().__init__(f"Path {path} does not exist")
        self.path = str(path)


class NotADirectory(UploaderError):
    """Source path exists but is not a directory."""

    def __init__(self, path):
        super().__init__(f"Path {path} is not a directory")
        self.path = str(path)


class UnmappedCategory(UploaderError):
    """Category label has no entry in the topic routing table."""

    def __init__(self, category: str):
        super().__init__(f"Category is not mapped to a topic: {category}")
        self.category = category


class FileVanished(UploaderError):
    """A file listed in the tree is gone by the time it is uploaded."""

    def __init__(self, path):
        super().__init__("File does not exist")
        self.path = str(path)


class TransferFailed(UploaderError):
    """The transport could not deliver a file."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class CheckpointCorrupted(UploaderError):
    """A checkpoint record exists but cannot be parsed."""


class CheckpointWriteFailed(UploaderError):
    """A checkpoint record could not be written to disk."""
