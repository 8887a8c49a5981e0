#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for the Folder Uploader.
"""

import argparse
import sys
import logging
from dataclasses import replace
from pathlib import Path

from .config import RateLimitConfig, load_settings, load_topic_mapping
from .commands.upload import UploadCommand
from .commands.checkpoint import cmd_list_checkpoints, cmd_cleanup_checkpoints, cmd_checkpoint_info
from .commands.tree import cmd_show_tree
from .jsonio import enable_json_logging
from .transport.telegram import TelegramUploader


def setup_logging(verbose: bool):
    """Configure logging for the CLI tool."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.debug("Verbose logging enabled (DEBUG level).")


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Folder Uploader - resumable uploads of a folder to a Telegram forum topic",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Upload a course folder into the topic mapped to its category
  %(prog)s upload-folder --group -1002046679214 --folder ./data/FullCycle --category FullCycle

  # See what would be sent without uploading anything
  %(prog)s upload-folder --group -1002046679214 --folder ./data/FullCycle --category FullCycle --dry-run

  # Interrupted? Run the exact same command again to resume.

  # Checkpoint management
  %(prog)s list-checkpoints --json
  %(prog)s checkpoint-info --key 5d41402abc4b2a76b9719d911017c592
  %(prog)s cleanup-checkpoints --days 7
        """
    )

    # Global options
    parser.add_argument("--env-file", help="Load environment variables from this file")
    parser.add_argument("--checkpoint-dir",
                       help="Directory for checkpoint files (default: UPLOADER_CHECKPOINT_DIR or .checkpoints)")
    parser.add_argument("--verbose", "-v", action="store_true",
                       help="Enable verbose (DEBUG) output")
    parser.add_argument("--json", action="store_true",
                       help="Output results as JSON instead of human-readable text")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    _add_upload_parsers(subparsers)
    _add_checkpoint_parsers(subparsers)
    _add_tree_parser(subparsers)

    return parser


def _add_rate_limit_args(p):
    p.add_argument("--delay-ms", type=int,
                   help="Delay between uploads in milliseconds (default: TELEGRAM_UPLOAD_DELAY_MS or 1000)")
    p.add_argument("--no-rate-limit", action="store_true",
                   help="Disable the delay between uploads")


def _add_upload_parsers(subparsers):
    """Add upload command parsers."""
    folder_parser = subparsers.add_parser("upload-folder", help="Upload every file of a folder")
    folder_parser.add_argument("--group", required=True, help="Telegram group (chat) id")
    folder_parser.add_argument("--folder", required=True, help="Folder to upload")
    folder_parser.add_argument("--category", required=True,
                              help="Category label; must appear in the folder path and be mapped to a topic")
    folder_parser.add_argument("--caption", help="Caption title used instead of the file name")
    folder_parser.add_argument("--topics-file", help="JSON file mapping category labels to topic ids")
    folder_parser.add_argument("--dry-run", action="store_true",
                              help="Show what would be uploaded without sending anything")
    _add_rate_limit_args(folder_parser)
    folder_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")

    file_parser = subparsers.add_parser("upload-file", help="Upload a single file")
    file_parser.add_argument("--group", required=True, help="Telegram group (chat) id")
    file_parser.add_argument("--topic", required=True, help="Topic id or mapped category label")
    file_parser.add_argument("--file", required=True, help="File to upload")
    file_parser.add_argument("--caption", help="Caption title used instead of the file name")
    file_parser.add_argument("--topics-file", help="JSON file mapping category labels to topic ids")
    file_parser.add_argument("--dry-run", action="store_true",
                            help="Show what would be uploaded without sending anything")
    file_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")


def _add_checkpoint_parsers(subparsers):
    """Add checkpoint command parsers."""
    list_chk_parser = subparsers.add_parser("list-checkpoints", help="List available checkpoints")
    list_chk_parser.add_argument("--source", help="Filter by source folder")
    list_chk_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")

    info_chk_parser = subparsers.add_parser("checkpoint-info", help="Show checkpoint details")
    info_chk_parser.add_argument("--key", required=True, help="Checkpoint key")
    info_chk_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")

    cleanup_chk_parser = subparsers.add_parser("cleanup-checkpoints", help="Clean up old checkpoints")
    cleanup_chk_parser.add_argument("--days", type=int, default=7,
                                   help="Remove checkpoints older than N days (default: 7)")
    cleanup_chk_parser.add_argument("--key", help="Remove specific checkpoint by key")
    cleanup_chk_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")


def _add_tree_parser(subparsers):
    """Add tree command parser."""
    tree_parser = subparsers.add_parser("tree", help="Print the folder tree that would be uploaded")
    tree_parser.add_argument("--folder", required=True, help="Folder to inspect")
    tree_parser.add_argument("--export", help="Write the tree as JSON to this file")
    tree_parser.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help="Output as JSON")


def _rate_limit_from_args(args, base: RateLimitConfig) -> RateLimitConfig:
    rate_limit = base
    if getattr(args, 'delay_ms', None) is not None:
        rate_limit = replace(rate_limit, upload_delay_ms=args.delay_ms)
    if getattr(args, 'no_rate_limit', False):
        rate_limit = replace(rate_limit, enabled=False)
    return rate_limit


def _build_upload_command(args, settings) -> UploadCommand:
    topics_file = getattr(args, 'topics_file', None) or settings.topics_file
    topic_mapping = load_topic_mapping(Path(topics_file) if topics_file else None)

    uploader = None
    if not args.dry_run:
        uploader = TelegramUploader(settings.bot_token, api_base=settings.api_base)

    return UploadCommand(
        uploader=uploader,
        checkpoint_dir=Path(args.checkpoint_dir) if args.checkpoint_dir else settings.checkpoint_dir,
        topic_mapping=topic_mapping,
        rate_limit=_rate_limit_from_args(args, settings.rate_limit),
    )


def main():
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Setup logging based on --verbose (but suppress if JSON output requested)
    if getattr(args, 'json', False):
        enable_json_logging()
    else:
        setup_logging(args.verbose)

    logging.debug("Parsed arguments: %s", args)

    settings = load_settings(Path(args.env_file) if args.env_file else None)
    checkpoint_dir = Path(args.checkpoint_dir) if args.checkpoint_dir else settings.checkpoint_dir
    as_json = getattr(args, 'json', False)
    command = None

    try:
        if args.command == "upload-folder":
            logging.info("Starting folder upload.")
            command = _build_upload_command(args, settings)
            return command.upload_folder(
                destination=args.group,
                source=Path(args.folder),
                category=args.category,
                dry_run=args.dry_run,
                caption=args.caption,
                as_json=as_json,
            )

        elif args.command == "upload-file":
            logging.info("Uploading %s", args.file)
            command = _build_upload_command(args, settings)
            return command.upload_file(
                destination=args.group,
                topic=args.topic,
                file_path=Path(args.file),
                caption=args.caption,
                dry_run=args.dry_run,
                as_json=as_json,
            )

        elif args.command == "list-checkpoints":
            logging.info("Listing checkpoints...")
            return cmd_list_checkpoints(checkpoint_dir, args.source, as_json)

        elif args.command == "checkpoint-info":
            logging.info("Fetching checkpoint info for key=%s", args.key)
            return cmd_checkpoint_info(checkpoint_dir, args.key, as_json)

        elif args.command == "cleanup-checkpoints":
            logging.info("Cleaning up checkpoints (days=%d, key=%s)", args.days, args.key)
            return cmd_cleanup_checkpoints(checkpoint_dir, args.days, args.key, as_json)

        elif args.command == "tree":
            return cmd_show_tree(Path(args.folder), Path(args.export) if args.export else None, as_json)

    except KeyboardInterrupt:
        if as_json:
            from .jsonio import error
            return error(args.command, "Operation interrupted by user", code=130)
        logging.warning("Operation interrupted by user.")
        if args.command == "upload-folder" and not args.dry_run:
            print("💡 Run the same command again to resume from the checkpoint.")
        return 130
    except Exception as e:
        if as_json:
            from .jsonio import error
            debug_info = {"exception_type": type(e).__name__} if args.verbose else None
            return error(args.command, str(e), debug=debug_info, code=1)
        logging.error("Error occurred: %s", e, exc_info=args.verbose)
        return 1
    finally:
        if command is not None and command.uploader is not None:
            command.uploader.close()


if __name__ == "__main__":
    sys.exit(main())
