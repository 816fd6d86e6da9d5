"""
Unit tests for attachment normalization.
Shape discrimination, size limit, MIME inference and per-environment encoding.
"""

import base64

import pytest

from metigan.application.services.attachment_normalizer import (
    MAX_ATTACHMENT_SIZE,
    coerce_attachment,
    mime_type_for,
    normalize_attachments,
)
from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ValidationError
from metigan.domain.models import BrowserFile, Environment, GenericAttachment, ServerBuffer

MIME_TABLE = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "txt": "text/plain",
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "csv": "text/csv",
    "zip": "application/zip",
    "rar": "application/x-rar-compressed",
    "tar": "application/x-tar",
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
    "wav": "audio/wav",
    "avi": "video/x-msvideo",
}


class TestMimeTypes:

    @pytest.mark.parametrize("ext,mime", sorted(MIME_TABLE.items()))
    def test_known_extension(self, ext, mime):
        assert mime_type_for(f"file.{ext}") == mime

    @pytest.mark.parametrize("ext,mime", sorted(MIME_TABLE.items()))
    def test_extension_is_case_insensitive(self, ext, mime):
        assert mime_type_for(f"FILE.{ext.upper()}") == mime

    @pytest.mark.parametrize("name", ["unknown.xyz", "noextension", "", None, "archive.tar.gz"])
    def test_unknown_or_missing_extension(self, name):
        assert mime_type_for(name) == "application/octet-stream"

    def test_only_last_extension_counts(self):
        assert mime_type_for("report.final.pdf") == "application/pdf"


class TestCoercion:

    def test_dataclasses_pass_through(self):
        item = ServerBuffer(buffer=b"x", originalname="a.txt")
        assert coerce_attachment(item) is item

    def test_buffer_mapping_becomes_server_buffer(self):
        att = coerce_attachment({"buffer": b"abc", "originalname": "a.pdf", "mimetype": "application/pdf"})
        assert att == ServerBuffer(buffer=b"abc", originalname="a.pdf", mimetype="application/pdf")

    def test_content_mapping_becomes_generic(self):
        att = coerce_attachment({"content": "hello", "filename": "a.txt", "contentType": "text/plain"})
        assert att == GenericAttachment(content="hello", filename="a.txt", content_type="text/plain")

    def test_buffer_pair_wins_over_content_pair(self):
        att = coerce_attachment({"buffer": b"1", "originalname": "a.bin", "content": b"2", "filename": "b.bin"})
        assert isinstance(att, ServerBuffer)

    def test_object_with_attributes(self):
        class Upload:
            buffer = b"data"
            originalname = "up.png"
            mimetype = ""

        att = coerce_attachment(Upload())
        assert isinstance(att, ServerBuffer)
        assert att.originalname == "up.png"

    @pytest.mark.parametrize("item", [{"foo": "bar"}, {"buffer": b"x"}, {"filename": "a.txt"}, 42, "file.txt"])
    def test_unknown_shape_is_rejected(self, item):
        with pytest.raises(ValidationError) as exc_info:
            coerce_attachment(item)
        assert exc_info.value.code == ErrorCode.INVALID_ATTACHMENT
        assert "Invalid attachment format" in str(exc_info.value)


class TestNormalize:

    @pytest.mark.parametrize("items", [None, []])
    def test_empty_input(self, items):
        assert normalize_attachments(items, Environment.SERVER) == []

    def test_one_record_per_item_in_order(self):
        items = [
            GenericAttachment(content="text body", filename="notes.txt"),
            {"buffer": b"%PDF", "originalname": "doc.pdf", "mimetype": ""},
            BrowserFile(name="pic.png", content=b"\x89PNG"),
            {"content": b"x,y", "filename": "data.csv"},
        ]
        result = normalize_attachments(items, Environment.SERVER)

        assert [a.filename for a in result] == ["notes.txt", "doc.pdf", "pic.png", "data.csv"]
        assert [a.content_type for a in result] == ["text/plain", "application/pdf", "image/png", "text/csv"]
        for att in result:
            assert att.encoding == "base64"
            assert att.disposition == "attachment"

    def test_explicit_content_type_is_kept(self):
        result = normalize_attachments(
            [ServerBuffer(buffer=b"x", originalname="a.pdf", mimetype="application/x-custom")],
            Environment.SERVER,
        )
        assert result[0].content_type == "application/x-custom"

    def test_server_keeps_raw_bytes(self):
        result = normalize_attachments([ServerBuffer(buffer=bytearray(b"raw"), originalname="a.bin")], Environment.SERVER)
        assert result[0].content == b"raw"

    def test_browser_base64_encodes_binary(self):
        result = normalize_attachments(
            [ServerBuffer(buffer=b"raw bytes", originalname="a.bin"), GenericAttachment(content="plain", filename="b.txt")],
            Environment.BROWSER,
        )
        assert result[0].content == base64.b64encode(b"raw bytes").decode("ascii")
        # text is forwarded as given
        assert result[1].content == "plain"

    def test_oversized_item_names_file_and_limit(self):
        big = ServerBuffer(buffer=b"\0" * (8 * 1024 * 1024), originalname="large.bin")
        with pytest.raises(ValidationError) as exc_info:
            normalize_attachments([big], Environment.SERVER)

        assert exc_info.value.code == ErrorCode.ATTACHMENT_TOO_LARGE
        assert "large.bin" in str(exc_info.value)
        assert "7MB" in str(exc_info.value)

    def test_exactly_at_limit_is_accepted(self):
        item = GenericAttachment(content=b"\0" * MAX_ATTACHMENT_SIZE, filename="edge.bin")
        assert len(normalize_attachments([item], Environment.SERVER)) == 1

    def test_text_size_is_measured_in_utf8_bytes(self):
        # fewer characters than the limit, more bytes than the limit
        text = "é" * (MAX_ATTACHMENT_SIZE // 2 + 1)
        assert len(text) < MAX_ATTACHMENT_SIZE
        with pytest.raises(ValidationError) as exc_info:
            normalize_attachments([GenericAttachment(content=text, filename="accents.txt")], Environment.SERVER)
        assert exc_info.value.code == ErrorCode.ATTACHMENT_TOO_LARGE

    def test_first_failure_stops_the_batch(self):
        items = [
            BrowserFile(name="huge.mp4", content=b"\0" * (MAX_ATTACHMENT_SIZE + 1)),
            {"foo": "bar"},
        ]
        with pytest.raises(ValidationError) as exc_info:
            normalize_attachments(items, Environment.SERVER)
        assert exc_info.value.code == ErrorCode.ATTACHMENT_TOO_LARGE

    def test_invalid_item_fails_whole_batch(self):
        items = [GenericAttachment(content=b"ok", filename="ok.txt"), {"foo": "bar"}]
        with pytest.raises(ValidationError) as exc_info:
            normalize_attachments(items, Environment.SERVER)
        assert exc_info.value.code == ErrorCode.INVALID_ATTACHMENT
