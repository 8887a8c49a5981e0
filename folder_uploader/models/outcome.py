#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-file and per-run results of a folder upload.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FileKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    PHOTO = "photo"
    DOCUMENT = "document"


@dataclass
class FileOutcome:
    """Result of handling a single file."""
    success: bool
    file_name: str
    relative_path: str
    message_id: Optional[int] = None
    error: Optional[str] = None
    dry_run: bool = False
    file_kind: Optional[FileKind] = None
    size_bytes: Optional[int] = None
    caption: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["file_kind"] = self.file_kind.value if self.file_kind else None
        return data


@dataclass
class RunSummary:
    """Cumulative view of a folder upload run."""
    session_id: str
    checkpoint_file: str
    resumed: bool
    dry_run: bool
    total_files: int
    skipped_files: int
    successful: int
    failed: int
    cleaned_up: bool = False
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def all_success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "checkpoint_file": self.checkpoint_file,
            "resumed": self.resumed,
            "dry_run": self.dry_run,
            "total_files": self.total_files,
            "skipped_files": self.skipped_files,
            "successful": self.successful,
            "failed": self.failed,
            "cleaned_up": self.cleaned_up,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
