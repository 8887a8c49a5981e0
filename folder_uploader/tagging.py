#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Hashtag derivation from file paths.

Both functions are pure: the same input always gives the same output.
"""

import logging
import re
import unicodedata
from pathlib import PurePath
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\\/]+")
_SPACE_OR_DASH = re.compile(r"[\s\-]+")
_NOT_TAG_CHAR = re.compile(r"[^a-z0-9_]")
_LEADING_NUMBER = re.compile(r"^(\d+)[\s\-.]*")
_EXTENSION = re.compile(r"\.[A-Za-z0-9]+$")


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def sanitize_tag(text: str) -> str:
    """'Aula de Introdução - 1' -> 'aula_de_introducao_1'."""
    s = strip_diacritics(text).lower()
    s = _SPACE_OR_DASH.sub("_", s)
    return _NOT_TAG_CHAR.sub("", s)


def derive_tags(category: str, file_path: str) -> List[str]:
    """
    Classify a file by the directories between the category and the file.

    The first tag is always the normalized category. A second tag joins the
    sanitized directory segments that follow the first occurrence of
    ``category`` in ``file_path``; the file name itself never contributes.

    >>> derive_tags("FullCycle", "/data/FullCycle/001 - curso docker/002 - aula/x.mp4")
    ['#fullcycle', '#001_curso_docker_002_aula']
    """
    tags = [f"#{sanitize_tag(category)}"]

    index = file_path.find(category)
    if index == -1:
        logger.warning("Category %r not found in path %s", category, file_path)
        return tags

    after = file_path[index + len(category):]
    segments = [s for s in _SEPARATORS.split(after) if s]
    directories = segments[:-1]

    path_tag = "_".join(filter(None, (sanitize_tag(s) for s in directories)))
    if path_tag:
        tags.append(f"#{path_tag}")
    return tags


def format_hashtag(text: str) -> str:
    """
    Turn a numbered title into a hashtag body with the number moved last.

    '001 - curso docker' -> 'curso_docker_001'
    '001 - Nome da aula 1.mp4' -> 'nome_da_aula_1_001'
    """
    s = _EXTENSION.sub("", strip_diacritics(text).strip())

    match = _LEADING_NUMBER.match(s)
    if match:
        s = f"{s[match.end():].strip()} {match.group(1)}"

    s = re.sub(r"[^A-Za-z0-9 ]+", "_", s)
    s = re.sub(r" +", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return s.lower()


def build_caption(file_path: str, tags: Iterable[str], caption: Optional[str] = None) -> str:
    """Title line, blank line, then the hashtags separated by spaces."""
    title = caption or PurePath(file_path).stem
    hashtags = list(tags)
    file_tag = format_hashtag(PurePath(file_path).name)
    if file_tag:
        hashtags.append(f"#{file_tag}")
    if not hashtags:
        return title
    return f"{title}\n\n{' '.join(hashtags)}"
