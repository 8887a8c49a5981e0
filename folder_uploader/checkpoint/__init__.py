"""Checkpoint persistence for resumable uploads."""

from .store import CheckpointStore

__all__ = ['CheckpointStore']
