#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tree inspection command.
"""

import logging
from pathlib import Path
from typing import Optional

from ..jsonio import success
from ..tree.builder import TreeBuilder

logger = logging.getLogger(__name__)


def cmd_show_tree(source: Path, export: Optional[Path] = None, as_json: bool = False):
    """Print the folder tree and its statistics, optionally exporting it as JSON."""
    tree = TreeBuilder().build(source)
    stats = tree.stats()

    if export is not None:
        export.write_text(tree.to_json(), encoding="utf-8")
        logger.info("Tree exported to %s", export)

    if as_json:
        return success("tree", {
            "root": tree.get_root().absolute_path,
            "stats": stats.to_dict(),
            "export": str(export) if export else None,
        })

    for line in tree.render():
        print(line)
    print()
    print(f"{stats.total_nodes:,} nodes: {stats.file_count:,} files, "
          f"{stats.directory_count:,} directories, {stats.total_size_human}")
    return 0
