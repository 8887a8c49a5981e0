#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Checkpoint command implementations for the Folder Uploader.
"""

from pathlib import Path
from typing import Optional

from ..checkpoint.store import CheckpointStore
from ..errors import CheckpointCorrupted
from ..jsonio import success, error


def cmd_list_checkpoints(checkpoint_dir: Path, source_path: Optional[str] = None, as_json: bool = False):
    """List available checkpoints."""
    store = CheckpointStore(checkpoint_dir)
    checkpoints = store.list_checkpoints()
    if source_path:
        wanted = str(Path(source_path).resolve())
        checkpoints = [c for c in checkpoints if c.params.source_root == wanted]

    if as_json:
        checkpoint_data = []
        for c in checkpoints:
            checkpoint_data.append({
                "key": store.key_of(c),
                "session_id": c.session_id,
                "destination": c.params.destination,
                "source_root": c.params.source_root,
                "category": c.params.category,
                "last_update": c.last_update,
                "processed_files": c.stats.processed_files,
                "total_files": c.stats.total_files,
            })

        return success("list-checkpoints", {
            "checkpoints": checkpoint_data,
            "total_count": len(checkpoints),
            "source_filter": source_path
        })

    # Human-readable output
    if not checkpoints:
        print("No checkpoints found.")
        return 0

    print("Available checkpoints:")
    print(f"{'Key':<34} {'Source Path':<40} {'Category':<14} {'Updated':<26} {'Done':<12}")
    print("-" * 128)

    for c in checkpoints:
        # Truncate long paths
        source = c.params.source_root
        short_source = source if len(source) <= 37 else "..." + source[-34:]
        done = f"{c.stats.successful_uploads:,}/{c.stats.total_files:,}"
        print(f"{store.key_of(c):<34} {short_source:<40} {c.params.category:<14} {c.last_update:<26} {done:<12}")
    return 0


def cmd_cleanup_checkpoints(checkpoint_dir: Path, days: int = 7, key: Optional[str] = None, as_json: bool = False):
    """Clean up old checkpoints, or a single one by key."""
    store = CheckpointStore(checkpoint_dir)

    if key:
        if not store.path_for(key).exists():
            if as_json:
                return error("cleanup-checkpoints", f"Checkpoint {key} not found")
            print(f"Checkpoint {key} not found.")
            return 1

        store.cleanup(key)
        if as_json:
            return success("cleanup-checkpoints", {
                "mode": "single",
                "key": key,
                "message": f"Cleaned up checkpoint: {key}"
            })
        print(f"Cleaned up checkpoint: {key}")
        return 0

    cleaned_count = store.cleanup_old_checkpoints(days)
    remaining_count = len(store.list_checkpoints())

    if as_json:
        return success("cleanup-checkpoints", {
            "mode": "bulk",
            "days": days,
            "cleaned_count": cleaned_count,
            "remaining_count": remaining_count,
            "message": f"Cleaned up {cleaned_count} checkpoints older than {days} days"
        })
    print(f"Cleaned up {cleaned_count} checkpoints older than {days} days")
    return 0


def cmd_checkpoint_info(checkpoint_dir: Path, key: str, as_json: bool = False):
    """Show detailed checkpoint information."""
    store = CheckpointStore(checkpoint_dir)
    try:
        checkpoint = store.read(key)
    except CheckpointCorrupted as e:
        if as_json:
            return error("checkpoint-info", str(e))
        print(f"Checkpoint {key} is corrupted: {e}")
        return 1

    if not checkpoint:
        if as_json:
            return error("checkpoint-info", f"Checkpoint {key} not found")
        print(f"Checkpoint {key} not found.")
        return 1

    if as_json:
        data = checkpoint.to_dict()
        data["key"] = key
        data["file"] = str(store.path_for(key))
        return success("checkpoint-info", data)

    # Human-readable output
    stats = checkpoint.stats
    print(f"=== Checkpoint: {key} ===")
    print(f"File: {store.path_for(key)}")
    print(f"Session: {checkpoint.session_id}")
    print(f"Destination: {checkpoint.params.destination}")
    print(f"Source: {checkpoint.params.source_root}")
    print(f"Category: {checkpoint.params.category}")
    print(f"Started: {checkpoint.start_time}")
    print(f"Last update: {checkpoint.last_update}")
    print(f"Files: {stats.processed_files:,}/{stats.total_files:,} processed "
          f"({stats.successful_uploads:,} successful, {stats.failed_uploads:,} failed)")
    print(f"Completed paths recorded: {len(checkpoint.completed_files):,}")
    return 0
