#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
File kind detection for uploads.
"""

import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from ..config import (AUDIO_EXT, MAX_PHOTO_ASPECT_RATIO, MAX_PHOTO_BYTES,
                      MAX_PHOTO_DIMENSION_SUM, PHOTO_EXT, VIDEO_EXT)
from ..models.outcome import FileKind

logger = logging.getLogger(__name__)


def detect_file_kind(file_path: Union[str, Path]) -> FileKind:
    """Classify by extension; anything unknown is a document."""
    ext = Path(file_path).suffix.lower()
    if ext in VIDEO_EXT:
        return FileKind.VIDEO
    if ext in AUDIO_EXT:
        return FileKind.AUDIO
    if ext in PHOTO_EXT:
        return FileKind.PHOTO
    return FileKind.DOCUMENT


def fits_photo_limits(file_path: Union[str, Path]) -> bool:
    """Whether an image can be sent as a photo rather than as a document."""
    path = Path(file_path)
    try:
        if path.stat().st_size > MAX_PHOTO_BYTES:
            return False
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.debug("Cannot read image %s: %s", path, e)
        return False

    if not width or not height:
        return False
    if width + height > MAX_PHOTO_DIMENSION_SUM:
        return False
    return max(width, height) / min(width, height) <= MAX_PHOTO_ASPECT_RATIO
