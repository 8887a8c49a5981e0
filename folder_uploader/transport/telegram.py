#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Telegram Bot API uploader.

Sends each file to a forum topic of a group with the send method matching its
kind. Any transport or API problem surfaces as TransferFailed.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import DEFAULT_API_BASE, DEFAULT_MAX_RETRIES, DEFAULT_REQUEST_TIMEOUT, MAX_CAPTION_LENGTH
from ..errors import TransferFailed
from ..models.outcome import FileKind
from .base import UploadReceipt
from .media import detect_file_kind, fits_photo_limits

logger = logging.getLogger(__name__)

# kind -> (API method, multipart field)
SEND_METHODS = {
    FileKind.VIDEO: ("sendVideo", "video"),
    FileKind.AUDIO: ("sendAudio", "audio"),
    FileKind.PHOTO: ("sendPhoto", "photo"),
    FileKind.DOCUMENT: ("sendDocument", "document"),
}


class TelegramUploader:
    """Uploader backed by the Telegram Bot API."""

    def __init__(self, bot_token: str, api_base: str = DEFAULT_API_BASE,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT, max_retries: int = DEFAULT_MAX_RETRIES,
                 session: Optional[requests.Session] = None):
        if not bot_token:
            raise ValueError("A Telegram bot token is required (set TELEGRAM_BOT_TOKEN)")
        self.api_base = api_base.rstrip("/")
        self._bot_token = bot_token
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=frozenset({"GET", "POST"}),
                respect_retry_after_header=True,
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.session.close()

    def _url(self, method: str) -> str:
        return f"{self.api_base}/bot{self._bot_token}/{method}"

    def upload(self, destination: str, route_id: Union[int, str], file_path: str,
               caption: Optional[str] = None) -> UploadReceipt:
        path = Path(file_path)
        if not path.is_file():
            raise TransferFailed("File does not exist")

        size_bytes = path.stat().st_size
        file_kind = detect_file_kind(path)
        send_kind = file_kind
        if file_kind == FileKind.PHOTO and not self._photo_fits(path):
            logger.info("Photo %s exceeds photo limits, sending as document", path.name)
            send_kind = FileKind.DOCUMENT

        method, field_name = SEND_METHODS[send_kind]
        data = {
            "chat_id": str(destination),
            "message_thread_id": str(route_id),
            "caption": (caption or path.name)[:MAX_CAPTION_LENGTH],
        }

        logger.debug("Calling %s for %s (%d bytes)", method, path.name, size_bytes)
        result = self._post_file(method, data, field_name, path)

        message_id = result.get("message_id")
        logger.info("File uploaded successfully: %s (%s, message %s)", path.name, file_kind.value, message_id)
        return UploadReceipt(message_id=message_id, file_kind=file_kind, size_bytes=size_bytes)

    @staticmethod
    def _photo_fits(path: Path) -> bool:
        # Image inspection must fail this file only, never the batch
        try:
            return fits_photo_limits(path)
        except Exception as e:
            raise TransferFailed(f"Cannot inspect image {path.name}: {e}") from e

    def _post_file(self, method: str, data: Dict[str, str], field_name: str, path: Path) -> Dict[str, Any]:
        try:
            with path.open("rb") as f:
                response = self.session.post(
                    self._url(method),
                    data=data,
                    files={field_name: (path.name, f)},
                    timeout=(10, self.timeout),
                )
        except requests.exceptions.Timeout as e:
            raise TransferFailed(f"Upload timeout: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise TransferFailed(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransferFailed(f"Network error: {e}") from e
        except OSError as e:
            raise TransferFailed(f"Cannot read file: {e}") from e

        return self._parse_response(response)

    @staticmethod
    def _parse_response(response: requests.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            raise TransferFailed(
                f"Upload failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        if not isinstance(payload, dict) or not payload.get("ok"):
            description = payload.get("description") if isinstance(payload, dict) else None
            raise TransferFailed(
                description or f"Upload failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return payload.get("result") or {}
