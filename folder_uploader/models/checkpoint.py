#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for upload checkpoints in the Folder Uploader.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Set

from ..errors import CheckpointCorrupted


@dataclass
class CheckpointParams:
    """The arguments that identify one upload job."""
    destination: str
    source_root: str
    category: str
    dry_run: bool = False


@dataclass
class CheckpointStats:
    total_files: int = 0
    processed_files: int = 0
    successful_uploads: int = 0
    failed_uploads: int = 0


@dataclass
class UploadCheckpoint:
    """Checkpoint data structure for resuming folder uploads."""
    session_id: str
    start_time: str
    last_update: str
    params: CheckpointParams
    stats: CheckpointStats = field(default_factory=CheckpointStats)

    # Relative paths (POSIX separators) confirmed uploaded
    completed_files: Set[str] = field(default_factory=set)

    @property
    def is_resume(self) -> bool:
        return bool(self.completed_files)

    @property
    def remaining_files(self) -> int:
        return max(0, self.stats.total_files - self.stats.processed_files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert checkpoint to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "start_time": self.start_time,
            "last_update": self.last_update,
            "params": {
                "destination": self.params.destination,
                "source_root": self.params.source_root,
                "category": self.params.category,
                "dry_run": self.params.dry_run,
            },
            "stats": {
                "total_files": self.stats.total_files,
                "processed_files": self.stats.processed_files,
                "successful_uploads": self.stats.successful_uploads,
                "failed_uploads": self.stats.failed_uploads,
            },
            "completed_files": sorted(self.completed_files),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadCheckpoint':
        """Create checkpoint from dictionary, raising CheckpointCorrupted on bad shape."""
        try:
            params = data["params"]
            stats = data["stats"]
            completed = data["completed_files"]
            if not isinstance(completed, list):
                raise TypeError("completed_files must be a list")
            return cls(
                session_id=str(data["session_id"]),
                start_time=str(data["start_time"]),
                last_update=str(data["last_update"]),
                params=CheckpointParams(
                    destination=str(params["destination"]),
                    source_root=str(params["source_root"]),
                    category=str(params["category"]),
                    dry_run=bool(params.get("dry_run", False)),
                ),
                stats=CheckpointStats(
                    total_files=int(stats["total_files"]),
                    processed_files=int(stats["processed_files"]),
                    successful_uploads=int(stats["successful_uploads"]),
                    failed_uploads=int(stats["failed_uploads"]),
                ),
                completed_files={str(p) for p in completed},
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CheckpointCorrupted(f"Invalid checkpoint record: {e}") from e
