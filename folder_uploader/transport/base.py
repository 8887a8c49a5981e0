#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Uploader contract used by the orchestrator.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Union

from ..models.outcome import FileKind


@dataclass
class UploadReceipt:
    """What the transport reports back after delivering a file."""
    message_id: Optional[int]
    file_kind: FileKind
    size_bytes: int


class Uploader(Protocol):
    """
    Delivers one file at a time.

    Implementations raise TransferFailed for any network, auth or API problem.
    """

    def upload(self, destination: str, route_id: Union[int, str], file_path: str,
               caption: Optional[str] = None) -> UploadReceipt:
        ...
