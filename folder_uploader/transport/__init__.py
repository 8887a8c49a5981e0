"""Transports that deliver files to a messaging destination."""

from .base import Uploader, UploadReceipt
from .media import detect_file_kind, fits_photo_limits
from .telegram import TelegramUploader

__all__ = ['Uploader', 'UploadReceipt', 'detect_file_kind', 'fits_photo_limits', 'TelegramUploader']
