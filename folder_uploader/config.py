#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for the Folder Uploader.

Constants below are defaults. Runtime values come from the environment (and an
optional .env file) through load_settings(), and CLI flags override those.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Set

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# File type categories
VIDEO_EXT: Set[str] = {".mp4", ".avi", ".mov", ".mkv", ".webm", ".m4v"}
AUDIO_EXT: Set[str] = {".mp3", ".wav", ".aac", ".ogg", ".m4a", ".flac"}
PHOTO_EXT: Set[str] = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}

# Telegram Bot API limits
DEFAULT_API_BASE = "https://api.telegram.org"
MAX_CAPTION_LENGTH = 1024
MAX_PHOTO_BYTES = 10 * 1024 * 1024  # 10MB
MAX_PHOTO_DIMENSION_SUM = 10_000
MAX_PHOTO_ASPECT_RATIO = 20

# Request defaults
DEFAULT_REQUEST_TIMEOUT = 300
DEFAULT_MAX_RETRIES = 3

# Rate limiting defaults
DEFAULT_UPLOAD_DELAY_MS = 1000

# Checkpoint defaults
DEFAULT_CHECKPOINT_DIR = ".checkpoints"
CHECKPOINT_PREFIX = "checkpoint_"
MAX_CONSECUTIVE_WRITE_FAILURES = 3

# Category label -> forum topic id
TOPIC_MAPPING: Dict[str, int] = {
    "FullCycle": 523,
}


@dataclass(frozen=True)
class RateLimitConfig:
    """Delay applied between consecutive uploads of one run."""
    enabled: bool = True
    upload_delay_ms: int = DEFAULT_UPLOAD_DELAY_MS

    @property
    def delay_seconds(self) -> float:
        if not self.enabled or self.upload_delay_ms <= 0:
            return 0.0
        return self.upload_delay_ms / 1000.0


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""
    bot_token: Optional[str] = None
    api_base: str = DEFAULT_API_BASE
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    checkpoint_dir: Path = Path(DEFAULT_CHECKPOINT_DIR)
    topics_file: Optional[Path] = None


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() != "false"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", name, raw, default)
        return default


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Build Settings from the process environment and an optional .env file."""
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    topics_file = os.getenv("UPLOADER_TOPICS_FILE")
    return Settings(
        bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        api_base=os.getenv("TELEGRAM_API_BASE", DEFAULT_API_BASE),
        rate_limit=RateLimitConfig(
            enabled=_env_flag(os.getenv("TELEGRAM_RATE_LIMITING_ENABLED")),
            upload_delay_ms=_env_int("TELEGRAM_UPLOAD_DELAY_MS", DEFAULT_UPLOAD_DELAY_MS),
        ),
        checkpoint_dir=Path(os.getenv("UPLOADER_CHECKPOINT_DIR", DEFAULT_CHECKPOINT_DIR)),
        topics_file=Path(topics_file) if topics_file else None,
    )


def load_topic_mapping(topics_file: Optional[Path] = None) -> Mapping[str, int]:
    """
    Return the category -> topic routing table.

    Entries from topics_file (a JSON object) are layered over TOPIC_MAPPING.
    """
    mapping: Dict[str, int] = dict(TOPIC_MAPPING)
    if topics_file is None:
        return mapping

    with Path(topics_file).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Topics file {topics_file} must contain a JSON object")

    for label, topic_id in data.items():
        mapping[str(label)] = int(topic_id)
    logger.debug("Loaded %d topic mappings from %s", len(data), topics_file)
    return mapping
