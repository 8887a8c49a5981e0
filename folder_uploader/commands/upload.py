#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Upload commands (thin wrappers).
Folder uploads delegate to UploadOrchestrator; this module only prints banners
and summaries and turns results into exit codes.
"""

from pathlib import Path
from typing import Mapping, Optional, Union

from ..checkpoint.store import CheckpointStore
from ..config import RateLimitConfig
from ..errors import TransferFailed, UnmappedCategory
from ..jsonio import error, success
from ..models.outcome import RunSummary
from ..tagging import build_caption
from ..transport.base import Uploader
from ..transport.media import detect_file_kind
from ..upload.orchestrator import UploadOrchestrator
from ..utils.format import format_file_size
from ..utils.time import utc_now_str


class UploadCommand:
    def __init__(self, uploader: Optional[Uploader], checkpoint_dir: Path,
                 topic_mapping: Mapping[str, Union[int, str]], rate_limit: RateLimitConfig):
        self.uploader = uploader
        self.checkpoint_dir = checkpoint_dir
        self.topic_mapping = topic_mapping
        self.rate_limit = rate_limit

    def upload_folder(self, destination: str, source: Path, category: str,
                      dry_run: bool = False, caption: Optional[str] = None,
                      as_json: bool = False) -> int:
        """Upload every file under ``source``; resumable with the same arguments."""
        store = CheckpointStore(self.checkpoint_dir)
        engine = UploadOrchestrator(
            uploader=self.uploader,
            store=store,
            topic_mapping=self.topic_mapping,
            rate_limit=self.rate_limit,
            show_progress=not as_json,
        )

        if not as_json:
            self._print_header(destination, source, category, dry_run)

        try:
            engine.run(destination, source, category, dry_run=dry_run, caption=caption)
        except KeyboardInterrupt:
            if not dry_run and not as_json:
                print("\n⚠️  Upload interrupted! Run the same command again to resume.")
            raise

        summary = engine.last_summary
        if as_json:
            return success("upload-folder", summary.to_dict(), code=0 if summary.all_success else 1)

        self._print_summary(summary)
        return 0 if summary.all_success else 1

    def upload_file(self, destination: str, topic: Union[int, str], file_path: Path,
                    caption: Optional[str] = None, dry_run: bool = False,
                    as_json: bool = False) -> int:
        """Upload a single file to a topic id or mapped category label."""
        if str(topic) in self.topic_mapping:
            route_id = self.topic_mapping[str(topic)]
        elif str(topic).lstrip("-").isdigit():
            route_id = topic
        else:
            raise UnmappedCategory(str(topic))

        if not file_path.is_file():
            if as_json:
                return error("upload-file", f"File does not exist: {file_path}")
            print(f"❌ File does not exist: {file_path}")
            return 1

        full_caption = build_caption(str(file_path), [], caption)
        if dry_run:
            data = {
                "file_name": file_path.name,
                "file_kind": detect_file_kind(file_path).value,
                "size_bytes": file_path.stat().st_size,
                "destination": destination,
                "topic": route_id,
                "caption": full_caption,
                "dry_run": True,
            }
            if as_json:
                return success("upload-file", data)
            print(f"DRY RUN: would upload {file_path.name} ({data['file_kind']}, "
                  f"{format_file_size(data['size_bytes'])}) to {destination}/{route_id}")
            return 0

        try:
            receipt = self.uploader.upload(destination, route_id, str(file_path), full_caption)
        except TransferFailed as e:
            if as_json:
                return error("upload-file", str(e))
            print(f"❌ Failed to upload {file_path.name}: {e}")
            return 1

        if as_json:
            return success("upload-file", {
                "file_name": file_path.name,
                "message_id": receipt.message_id,
                "file_kind": receipt.file_kind.value,
                "size_bytes": receipt.size_bytes,
            })
        print(f"✅ File uploaded successfully: {file_path.name} (message {receipt.message_id})")
        return 0

    def _print_header(self, destination: str, source: Path, category: str, dry_run: bool):
        """Print upload configuration header."""
        print("=" * 80)
        print(f"FOLDER UPLOAD{' (DRY RUN)' if dry_run else ''} - {utc_now_str()}")
        print("=" * 80)
        print(f"Source: {source}")
        print(f"Destination: {destination}")
        print(f"Category: {category}")
        if self.rate_limit.delay_seconds > 0:
            print(f"Rate limit: {self.rate_limit.upload_delay_ms} ms between uploads")
        else:
            print("Rate limit: disabled")
        print()

    def _print_summary(self, summary: RunSummary):
        """Print run summary and retry instructions."""
        print()
        if summary.resumed:
            print(f"📂 Resumed session {summary.session_id}: {summary.skipped_files:,} files were already uploaded")

        if summary.dry_run:
            print(f"DRY RUN: {summary.successful:,} files would be uploaded, "
                  f"{summary.failed:,} problems, {summary.skipped_files:,} already completed")
            for outcome in summary.outcomes:
                status = "✓" if outcome.success else "✗"
                kind = outcome.file_kind.value if outcome.file_kind else "-"
                print(f"  {status} {outcome.relative_path} [{kind}]")
            return

        print(f"Upload completed: {summary.successful:,} successful, {summary.failed:,} failed "
              f"(of {summary.total_files:,} files)")

        if summary.failed > 0:
            print("\nFailed uploads:")
            for outcome in summary.outcomes:
                if not outcome.success:
                    print(f"  - {outcome.relative_path}: {outcome.error}")
            print("\n💡 Run the same command again to retry the failed files,")
            print(f"   or delete {summary.checkpoint_file} to start over.")
        elif summary.cleaned_up:
            print("🗑️  All files uploaded, checkpoint removed.")
