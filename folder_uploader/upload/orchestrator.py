#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Folder upload orchestration for the Folder Uploader.
Coordinates tree construction, checkpoint resume, tagging and the uploader.
"""

import logging
import time
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple, Union

from tqdm import tqdm

from ..checkpoint.store import CheckpointStore
from ..config import RateLimitConfig
from ..errors import FileVanished, NotADirectory, PathNotFound, TransferFailed, UnmappedCategory
from ..models.outcome import FileOutcome, RunSummary
from ..models.tree_node import TreeNode
from ..tagging import build_caption, derive_tags
from ..transport.base import Uploader
from ..transport.media import detect_file_kind
from ..tree.builder import TreeBuilder
from ..tree.folder_tree import FolderTree

logger = logging.getLogger(__name__)

# Failures that abort a run before any file is touched; the checkpoint is left as is
_VALIDATION_ERRORS = (PathNotFound, NotADirectory, UnmappedCategory)


class UploadOrchestrator:
    """
    Uploads every file of a folder, one at a time, resuming from a checkpoint.

    Files already recorded as completed are skipped; every other file is
    uploaded in tree order with a rate-limit delay between consecutive uploads.
    The checkpoint is persisted after each file.
    """

    def __init__(self, uploader: Uploader, store: CheckpointStore,
                 topic_mapping: Mapping[str, Union[int, str]],
                 rate_limit: Optional[RateLimitConfig] = None,
                 tree_builder: Optional[TreeBuilder] = None,
                 show_progress: bool = True,
                 sleep: Callable[[float], None] = time.sleep):
        self.uploader = uploader
        self.store = store
        self.topic_mapping = topic_mapping
        self.rate_limit = rate_limit or RateLimitConfig()
        self.tree_builder = tree_builder or TreeBuilder()
        self.show_progress = show_progress
        self._sleep = sleep
        self.last_summary: Optional[RunSummary] = None

    def run(self, destination: str, source_root: Union[str, Path], category: str,
            dry_run: bool = False, caption: Optional[str] = None) -> List[FileOutcome]:
        """Upload the folder and return the outcome of each file handled in this run."""
        # Init
        source = Path(source_root)
        if not source.exists():
            raise PathNotFound(source_root)
        source = source.resolve()

        checkpoint = self.store.open(destination, str(source), category, dry_run=dry_run)
        resumed = self.store.is_resume()
        if resumed:
            logger.info("Resuming upload session %s (%d files already uploaded)",
                        checkpoint.session_id, len(checkpoint.completed_files))

        outcomes: List[FileOutcome] = []
        try:
            tree = self.tree_builder.build(source)
            remaining, skipped = self._plan(tree, dry_run)
            route_id = self._resolve_route(category)
            self._process(remaining, destination, route_id, category, dry_run, caption, outcomes)
        except _VALIDATION_ERRORS:
            raise
        except BaseException:
            if not dry_run:
                logger.error("Upload aborted; saving progress before exiting")
                self.store.persist()
            raise

        self.last_summary = self._finalize(outcomes, len(remaining), len(skipped), resumed, dry_run)
        return outcomes

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _plan(self, tree: FolderTree, dry_run: bool) -> Tuple[List[TreeNode], List[TreeNode]]:
        """Split file nodes into those still to upload and those already completed."""
        remaining: List[TreeNode] = []
        skipped: List[TreeNode] = []
        for node in tree.iter_files():
            if self.store.is_completed(node.relative_path):
                skipped.append(node)
            else:
                remaining.append(node)

        if not dry_run:
            self.store.set_total_files(len(remaining) + len(skipped))
            self.store.reset_failures()

        logger.info("Found %d files: %d to upload, %d already completed",
                    len(remaining) + len(skipped), len(remaining), len(skipped))
        return remaining, skipped

    def _resolve_route(self, category: str) -> Union[int, str]:
        if category not in self.topic_mapping:
            raise UnmappedCategory(category)
        return self.topic_mapping[category]

    def _process(self, remaining: List[TreeNode], destination: str, route_id: Union[int, str],
                 category: str, dry_run: bool, caption: Optional[str],
                 outcomes: List[FileOutcome]) -> None:
        progress = tqdm(total=len(remaining), desc="Uploading", unit="file",
                        disable=not self.show_progress)
        try:
            for index, node in enumerate(remaining):
                if index > 0:
                    self._apply_rate_limit()

                progress.set_postfix_str(node.name, refresh=False)
                outcome = self._process_file(node, destination, route_id, category, dry_run, caption)
                outcomes.append(outcome)

                if not dry_run:
                    self.store.persist()
                progress.update(1)
        finally:
            progress.close()

    def _apply_rate_limit(self) -> None:
        delay = self.rate_limit.delay_seconds
        if delay > 0:
            logger.debug("Applying rate limit delay of %.3fs", delay)
            self._sleep(delay)

    def _process_file(self, node: TreeNode, destination: str, route_id: Union[int, str],
                      category: str, dry_run: bool, caption: Optional[str]) -> FileOutcome:
        path = Path(node.absolute_path)
        try:
            if not path.is_file():
                raise FileVanished(path)

            tags = derive_tags(category, node.absolute_path)
            full_caption = build_caption(node.absolute_path, tags, caption)

            if dry_run:
                return self._dry_run_outcome(node, path, destination, route_id, full_caption)

            receipt = self.uploader.upload(destination, route_id, str(path), full_caption)
        except (FileVanished, TransferFailed) as e:
            logger.warning("Failed to upload %s: %s", node.relative_path, e)
            if not dry_run:
                self.store.mark_failed()
            return FileOutcome(
                success=False,
                file_name=node.name,
                relative_path=node.relative_path,
                error=str(e),
                dry_run=dry_run,
            )

        self.store.mark_completed(node.relative_path)
        return FileOutcome(
            success=True,
            file_name=node.name,
            relative_path=node.relative_path,
            message_id=receipt.message_id,
            file_kind=receipt.file_kind,
            size_bytes=receipt.size_bytes,
            caption=full_caption,
        )

    def _dry_run_outcome(self, node: TreeNode, path: Path, destination: str,
                         route_id: Union[int, str], caption: str) -> FileOutcome:
        file_kind = detect_file_kind(path)
        size_bytes = path.stat().st_size
        logger.info("DRY RUN: would upload %s (%s, %d bytes) to %s/%s",
                    node.relative_path, file_kind.value, size_bytes, destination, route_id)
        return FileOutcome(
            success=True,
            file_name=node.name,
            relative_path=node.relative_path,
            dry_run=True,
            file_kind=file_kind,
            size_bytes=size_bytes,
            caption=caption,
        )

    def _finalize(self, outcomes: List[FileOutcome], remaining_count: int, skipped_count: int,
                  resumed: bool, dry_run: bool) -> RunSummary:
        checkpoint = self.store.checkpoint
        checkpoint_file = str(self.store.filename)

        if dry_run:
            successful = sum(1 for o in outcomes if o.success)
            failed = len(outcomes) - successful
            logger.info("DRY RUN complete: %d would be uploaded, %d problems, %d already completed",
                        successful, failed, skipped_count)
            return RunSummary(
                session_id=checkpoint.session_id,
                checkpoint_file=checkpoint_file,
                resumed=resumed,
                dry_run=True,
                total_files=remaining_count + skipped_count,
                skipped_files=skipped_count,
                successful=successful,
                failed=failed,
                outcomes=outcomes,
            )

        stats = checkpoint.stats
        cleaned_up = False
        if stats.failed_uploads == 0 and checkpoint.remaining_files == 0:
            cleaned_up = self.store.cleanup()
            logger.info("Upload complete: %d files uploaded successfully", stats.successful_uploads)
        elif stats.failed_uploads > 0:
            logger.warning(
                "Upload finished with %d failures (%d successful). Re-run the same command to "
                "retry, or delete %s to start over.",
                stats.failed_uploads, stats.successful_uploads, checkpoint_file,
            )

        return RunSummary(
            session_id=checkpoint.session_id,
            checkpoint_file=checkpoint_file,
            resumed=resumed,
            dry_run=False,
            total_files=stats.total_files,
            skipped_files=skipped_count,
            successful=stats.successful_uploads,
            failed=stats.failed_uploads,
            cleaned_up=cleaned_up,
            outcomes=outcomes,
        )
