#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the Telegram Bot API uploader and media helpers.
"""

import struct
import zlib
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from folder_uploader.checkpoint.store import CheckpointStore
from folder_uploader.config import RateLimitConfig
from folder_uploader.errors import TransferFailed
from folder_uploader.models.outcome import FileKind
from folder_uploader.transport.media import detect_file_kind, fits_photo_limits
from folder_uploader.transport.telegram import TelegramUploader
from folder_uploader.upload.orchestrator import UploadOrchestrator

TOKEN = "123456:ABC-DEF"
CHAT = "-1002046679214"


def png_header(width, height):
    """A PNG holding only its header chunks, claiming the given dimensions."""
    def chunk(kind, data):
        return (struct.pack(">I", len(data)) + kind + data
                + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")


def api_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


class TestUploaderFixture:
    """Test fixture that provides an uploader with a mocked HTTP session."""

    @pytest.fixture
    def session(self):
        session = MagicMock()
        session.post.return_value = api_response({"ok": True, "result": {"message_id": 42}})
        return session

    @pytest.fixture
    def uploader(self, session):
        return TelegramUploader(TOKEN, api_base="https://api.example.test/", session=session)

    def posted(self, session):
        args, kwargs = session.post.call_args
        return args[0], kwargs["data"], kwargs["files"]


class TestSendMethods(TestUploaderFixture):
    """Each file kind goes to its own API method."""

    @pytest.mark.parametrize("name, method, field", [
        ("lesson.mp4", "sendVideo", "video"),
        ("podcast.MP3", "sendAudio", "audio"),
        ("slides.pdf", "sendDocument", "document"),
        ("README", "sendDocument", "document"),
    ])
    def test_method_by_extension(self, tmp_path, uploader, session, name, method, field):
        """Test that the send method follows the file extension."""
        path = tmp_path / name
        path.write_bytes(b"content")

        receipt = uploader.upload(CHAT, 523, str(path), "caption")

        url, data, files = self.posted(session)
        assert url == f"https://api.example.test/bot{TOKEN}/{method}"
        assert list(files) == [field]
        assert data == {"chat_id": CHAT, "message_thread_id": "523", "caption": "caption"}
        assert receipt.message_id == 42
        assert receipt.size_bytes == 7

    def test_small_photo_is_sent_as_photo(self, tmp_path, uploader, session):
        """Test that a regular image uses sendPhoto."""
        path = tmp_path / "cover.png"
        Image.new("RGB", (64, 48)).save(path)

        receipt = uploader.upload(CHAT, 523, str(path))

        url, _, files = self.posted(session)
        assert url.endswith("/sendPhoto")
        assert "photo" in files
        assert receipt.file_kind == FileKind.PHOTO

    def test_oversized_photo_falls_back_to_document(self, tmp_path, uploader, session):
        """Test that an image outside photo limits is sent as a document."""
        path = tmp_path / "panorama.jpg"
        path.write_bytes(b"not really a jpeg")

        with patch("folder_uploader.transport.telegram.fits_photo_limits", return_value=False):
            receipt = uploader.upload(CHAT, 523, str(path))

        url, _, files = self.posted(session)
        assert url.endswith("/sendDocument")
        assert "document" in files
        assert receipt.file_kind == FileKind.PHOTO

    def test_decompression_bomb_is_sent_as_document(self, tmp_path, uploader, session):
        """Test that an image Pillow refuses to open still goes out as a document."""
        path = tmp_path / "poster.png"
        path.write_bytes(png_header(20000, 20000))

        receipt = uploader.upload(CHAT, 523, str(path))

        url, _, files = self.posted(session)
        assert url.endswith("/sendDocument")
        assert "document" in files
        assert receipt.file_kind == FileKind.PHOTO

    def test_caption_is_truncated(self, tmp_path, uploader, session):
        """Test that captions longer than the API limit are cut."""
        path = tmp_path / "lesson.mp4"
        path.write_bytes(b"x")

        uploader.upload(CHAT, 523, str(path), "a" * 2000)

        _, data, _ = self.posted(session)
        assert len(data["caption"]) == 1024

    def test_file_name_is_default_caption(self, tmp_path, uploader, session):
        path = tmp_path / "lesson.mp4"
        path.write_bytes(b"x")
        uploader.upload(CHAT, 523, str(path))
        _, data, _ = self.posted(session)
        assert data["caption"] == "lesson.mp4"


class TestUploadErrors(TestUploaderFixture):
    """Every failure surfaces as TransferFailed."""

    @pytest.fixture
    def video(self, tmp_path):
        path = tmp_path / "lesson.mp4"
        path.write_bytes(b"x")
        return path

    def test_missing_file(self, tmp_path, uploader, session):
        with pytest.raises(TransferFailed, match="File does not exist"):
            uploader.upload(CHAT, 523, str(tmp_path / "gone.mp4"))
        session.post.assert_not_called()

    def test_api_error_description(self, video, uploader, session):
        """Test that the API description becomes the error message."""
        session.post.return_value = api_response(
            {"ok": False, "error_code": 400, "description": "Bad Request: message thread not found"},
            status_code=400,
        )
        with pytest.raises(TransferFailed, match="message thread not found") as excinfo:
            uploader.upload(CHAT, 999, str(video))
        assert excinfo.value.status_code == 400

    def test_non_json_response(self, video, uploader, session):
        response = api_response(None, status_code=502)
        response.json.side_effect = ValueError("no json")
        response.text = "<html>Bad Gateway</html>"
        session.post.return_value = response

        with pytest.raises(TransferFailed, match="status 502"):
            uploader.upload(CHAT, 523, str(video))

    @pytest.mark.parametrize("exc, message", [
        (requests.exceptions.ConnectionError("refused"), "Connection error"),
        (requests.exceptions.ReadTimeout("slow"), "Upload timeout"),
        (requests.exceptions.TooManyRedirects("loop"), "Network error"),
    ])
    def test_transport_errors(self, video, uploader, session, exc, message):
        session.post.side_effect = exc
        with pytest.raises(TransferFailed, match=message):
            uploader.upload(CHAT, 523, str(video))

    def test_image_inspection_error_fails_the_file(self, tmp_path, uploader, session):
        """Test that an unexpected error while inspecting a photo is a TransferFailed."""
        path = tmp_path / "cover.jpg"
        path.write_bytes(b"x")

        with patch("folder_uploader.transport.telegram.fits_photo_limits",
                   side_effect=RuntimeError("decoder crashed")):
            with pytest.raises(TransferFailed, match="Cannot inspect image cover.jpg"):
                uploader.upload(CHAT, 523, str(path))
        session.post.assert_not_called()

    def test_token_required(self):
        with pytest.raises(ValueError):
            TelegramUploader("")

    def test_default_session_retries(self):
        """Test that the built-in session mounts a retrying adapter."""
        with TelegramUploader(TOKEN, max_retries=5) as uploader:
            adapter = uploader.session.get_adapter("https://api.telegram.org")
            assert adapter.max_retries.total == 5
            assert 429 in adapter.max_retries.status_forcelist


class TestMediaHelpers:
    """File kind detection and photo limits."""

    @pytest.mark.parametrize("name, kind", [
        ("a.mp4", FileKind.VIDEO),
        ("a.MKV", FileKind.VIDEO),
        ("a.flac", FileKind.AUDIO),
        ("a.jpeg", FileKind.PHOTO),
        ("a.zip", FileKind.DOCUMENT),
        ("Makefile", FileKind.DOCUMENT),
    ])
    def test_detect_file_kind(self, name, kind):
        assert detect_file_kind(name) == kind

    def test_regular_image_fits(self, tmp_path):
        path = tmp_path / "ok.png"
        Image.new("RGB", (800, 600)).save(path)
        assert fits_photo_limits(path)

    def test_extreme_aspect_ratio(self, tmp_path):
        path = tmp_path / "strip.png"
        Image.new("RGB", (2100, 100)).save(path)
        assert not fits_photo_limits(path)

    def test_dimension_sum_limit(self, tmp_path):
        path = tmp_path / "huge.png"
        Image.new("1", (6000, 5000)).save(path)
        assert not fits_photo_limits(path)

    def test_unreadable_image(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"not an image")
        assert not fits_photo_limits(path)

    def test_decompression_bomb_does_not_fit(self, tmp_path):
        path = tmp_path / "bomb.png"
        path.write_bytes(png_header(20000, 20000))
        assert path.stat().st_size == 57
        assert not fits_photo_limits(path)


class TestBatchWithLargeImages(TestUploaderFixture):
    """A single problematic image never stops the rest of the folder."""

    def test_folder_with_decompression_bomb(self, tmp_path, uploader, session):
        source = tmp_path / "FullCycle"
        source.mkdir()
        (source / "01 - poster.png").write_bytes(png_header(20000, 20000))
        (source / "02 - lesson.mp4").write_bytes(b"video")

        engine = UploadOrchestrator(
            uploader=uploader,
            store=CheckpointStore(tmp_path / "checkpoints"),
            topic_mapping={"FullCycle": 523},
            rate_limit=RateLimitConfig(enabled=False),
            show_progress=False,
        )
        outcomes = engine.run(CHAT, source, "FullCycle")

        assert [o.success for o in outcomes] == [True, True]
        urls = [call.args[0] for call in session.post.call_args_list]
        assert urls[0].endswith("/sendDocument")
        assert urls[1].endswith("/sendVideo")
