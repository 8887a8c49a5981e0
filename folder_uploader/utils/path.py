#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Path utility functions for the Folder Uploader.
"""

from pathlib import Path


def ensure_dir(p: Path) -> None:
    """Ensure directory exists, creating it if necessary."""
    p.mkdir(parents=True, exist_ok=True)


def is_hidden(name: str) -> bool:
    """Dot-prefixed names are hidden and never enter the tree."""
    return name.startswith(".")
