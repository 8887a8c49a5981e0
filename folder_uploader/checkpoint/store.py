#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Checkpoint store for resumable folder uploads in the Folder Uploader.

One JSON record per (destination, source root, category) job, named after a
hash of that triple so repeated invocations address the same record.
"""

import datetime as dt
import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from ..config import CHECKPOINT_PREFIX, DEFAULT_CHECKPOINT_DIR, MAX_CONSECUTIVE_WRITE_FAILURES
from ..errors import CheckpointCorrupted, CheckpointWriteFailed
from ..models.checkpoint import CheckpointParams, CheckpointStats, UploadCheckpoint
from ..utils.path import ensure_dir
from ..utils.time import now_iso

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Loads, mutates and persists the checkpoint of one upload job."""

    def __init__(self, checkpoint_dir: Optional[Path] = None):
        self.checkpoint_dir = Path(checkpoint_dir or DEFAULT_CHECKPOINT_DIR)
        self.key: Optional[str] = None
        self.checkpoint: Optional[UploadCheckpoint] = None
        self._write_failures = 0

    @staticmethod
    def identify(destination: str, source_root: str, category: str) -> str:
        """Stable key for a job triple."""
        combined = "\0".join((str(destination), str(source_root), str(category)))
        return hashlib.md5(combined.encode("utf-8")).hexdigest()

    def path_for(self, key: str) -> Path:
        return self.checkpoint_dir / f"{CHECKPOINT_PREFIX}{key}.json"

    @property
    def filename(self) -> Optional[Path]:
        return self.path_for(self.key) if self.key else None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def read(self, key: str) -> Optional[UploadCheckpoint]:
        """
        Parse the record for ``key`` without creating one.

        Returns None when absent; raises CheckpointCorrupted when unreadable.
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CheckpointCorrupted(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise CheckpointCorrupted(f"{path} does not contain a JSON object")
        return UploadCheckpoint.from_dict(data)

    def load(self, key: str, params: CheckpointParams) -> UploadCheckpoint:
        """Return the existing record for ``key``, or a fresh one for ``params``."""
        self.key = key
        self._write_failures = 0
        try:
            existing = self.read(key)
        except CheckpointCorrupted as e:
            logger.warning("Checkpoint file corrupted, starting fresh: %s", e)
            existing = None

        if existing is not None:
            self.checkpoint = existing
            logger.info("Loaded checkpoint: %d files already processed", len(existing.completed_files))
            return existing

        now = now_iso()
        self.checkpoint = UploadCheckpoint(
            session_id=str(int(time.time() * 1000)),
            start_time=now,
            last_update=now,
            params=params,
            stats=CheckpointStats(),
            completed_files=set(),
        )
        return self.checkpoint

    def open(self, destination: str, source_root: str, category: str,
             dry_run: bool = False) -> UploadCheckpoint:
        """identify() + load() in one step."""
        key = self.identify(destination, source_root, category)
        params = CheckpointParams(
            destination=str(destination),
            source_root=str(source_root),
            category=str(category),
            dry_run=dry_run,
        )
        return self.load(key, params)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _require(self) -> UploadCheckpoint:
        if self.checkpoint is None:
            raise RuntimeError("No checkpoint loaded")
        return self.checkpoint

    def is_completed(self, relative_path: str) -> bool:
        return self.checkpoint is not None and relative_path in self.checkpoint.completed_files

    def is_resume(self) -> bool:
        return self.checkpoint is not None and self.checkpoint.is_resume

    def mark_completed(self, relative_path: str) -> None:
        """Record a successful upload. Repeated calls for one path count once."""
        checkpoint = self._require()
        if relative_path in checkpoint.completed_files:
            return
        checkpoint.completed_files.add(relative_path)
        checkpoint.stats.successful_uploads += 1
        checkpoint.stats.processed_files += 1
        checkpoint.last_update = now_iso()

    def mark_failed(self) -> None:
        checkpoint = self._require()
        checkpoint.stats.failed_uploads += 1
        checkpoint.stats.processed_files += 1
        checkpoint.last_update = now_iso()

    def set_total_files(self, count: int) -> None:
        self._require().stats.total_files = count

    def reset_failures(self) -> None:
        """Forget failures of earlier passes; those files are about to be retried."""
        stats = self._require().stats
        stats.failed_uploads = 0
        stats.processed_files = stats.successful_uploads

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self) -> bool:
        """
        Write the current record. Failures are logged, never raised.

        Returns True when the record reached disk.
        """
        if self.checkpoint is None or self.key is None:
            return False

        path = self.path_for(self.key)
        try:
            self._write_atomic(path, self.checkpoint.to_dict())
        except CheckpointWriteFailed as e:
            self._write_failures += 1
            logger.error("Failed to save checkpoint: %s", e)
            if self._write_failures >= MAX_CONSECUTIVE_WRITE_FAILURES:
                logger.critical(
                    "Checkpoint %s could not be written %d times in a row; "
                    "progress of this run may not be resumable",
                    path, self._write_failures,
                )
            return False

        self._write_failures = 0
        logger.debug("Checkpoint saved: %s", path)
        return True

    def _write_atomic(self, path: Path, data: dict) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        tmp_name = None
        try:
            ensure_dir(path.parent)
            fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CheckpointWriteFailed(f"{path}: {e}") from e

    def cleanup(self, key: Optional[str] = None) -> bool:
        """Remove a record (the loaded one by default). Returns True if a file was deleted."""
        key = key or self.key
        if key is None:
            return False
        path = self.path_for(key)
        try:
            if path.exists():
                path.unlink()
                logger.info("Checkpoint cleaned up: %s", path)
                return True
        except OSError as e:
            logger.error("Failed to cleanup checkpoint %s: %s", path, e)
        return False

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def list_checkpoints(self) -> List[UploadCheckpoint]:
        """Readable records in the checkpoint directory, most recently updated first."""
        if not self.checkpoint_dir.exists():
            return []

        records = []
        for path in sorted(self.checkpoint_dir.glob(f"{CHECKPOINT_PREFIX}*.json")):
            key = path.stem[len(CHECKPOINT_PREFIX):]
            try:
                record = self.read(key)
            except CheckpointCorrupted as e:
                logger.warning("Skipping unreadable checkpoint %s: %s", path, e)
                continue
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.last_update, reverse=True)
        return records

    def key_of(self, checkpoint: UploadCheckpoint) -> str:
        return self.identify(
            checkpoint.params.destination,
            checkpoint.params.source_root,
            checkpoint.params.category,
        )

    def cleanup_old_checkpoints(self, days: int = 7) -> int:
        """Delete record files not modified for ``days`` days. Returns the count removed."""
        if not self.checkpoint_dir.exists():
            return 0

        cutoff = (dt.datetime.now() - dt.timedelta(days=days)).timestamp()
        removed = 0
        for path in self.checkpoint_dir.glob(f"{CHECKPOINT_PREFIX}*.json"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.warning("Could not remove old checkpoint %s: %s", path, e)
        logger.info("Cleaned up %d old checkpoints", removed)
        return removed
