# application/services/attachment_normalizer.py
from __future__ import annotations
import base64
import logging
from collections.abc import Mapping
from typing import Any, Iterable

from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ValidationError
from metigan.domain.models import (
    AttachmentInput,
    BrowserFile,
    Environment,
    GenericAttachment,
    ProcessedAttachment,
    ServerBuffer,
)

logger = logging.getLogger(__name__)

MAX_ATTACHMENT_SIZE = 7 * 1024 * 1024  # 7MB
DEFAULT_CONTENT_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
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


def mime_type_for(filename: str | None) -> str:
    name = filename or ""
    if "." not in name:
        return DEFAULT_CONTENT_TYPE
    ext = name.rsplit(".", 1)[-1].lower()
    return MIME_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def _get(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def _has(item: Any, *keys: str) -> bool:
    if isinstance(item, Mapping):
        return all(k in item for k in keys)
    return all(hasattr(item, k) for k in keys)


def coerce_attachment(item: Any) -> AttachmentInput:
    """
    Map an arbitrary attachment representation onto the three known shapes.
    Order matters: native file handle, then buffer+originalname, then
    content+filename.
    """
    if isinstance(item, (BrowserFile, ServerBuffer, GenericAttachment)):
        return item
    if _has(item, "buffer", "originalname"):
        return ServerBuffer(
            buffer=_get(item, "buffer"),
            originalname=_get(item, "originalname"),
            mimetype=_get(item, "mimetype") or "",
        )
    if _has(item, "content", "filename"):
        return GenericAttachment(
            content=_get(item, "content"),
            filename=_get(item, "filename"),
            content_type=_get(item, "content_type") or _get(item, "contentType") or "",
        )
    raise ValidationError("Invalid attachment format", ErrorCode.INVALID_ATTACHMENT)


def byte_length(content: Any) -> int:
    if isinstance(content, str):
        return len(content.encode("utf-8"))
    if isinstance(content, memoryview):
        return content.nbytes
    if isinstance(content, (bytes, bytearray)):
        return len(content)
    raise ValidationError("Invalid attachment format", ErrorCode.INVALID_ATTACHMENT)


def _unpack(att: AttachmentInput) -> tuple[str, Any, str, int]:
    """-> (filename, content, content_type, raw size)"""
    if isinstance(att, BrowserFile):
        return att.name, att.content, att.type or mime_type_for(att.name), att.size
    if isinstance(att, ServerBuffer):
        return att.originalname, att.buffer, att.mimetype or mime_type_for(att.originalname), byte_length(att.buffer)
    return att.filename, att.content, att.content_type or mime_type_for(att.filename), byte_length(att.content)


def normalize_attachments(items: Iterable[Any] | None, environment: Environment) -> list[ProcessedAttachment]:
    """
    Turn mixed attachment inputs into ProcessedAttachment records.

    All-or-nothing: the first malformed or oversized item aborts the batch with
    a ValidationError. In a browser, binary content is base64-encoded here;
    on the server it stays raw until the JSON payload is serialized. Text content
    is forwarded as given.
    """
    if not items:
        return []

    processed: list[ProcessedAttachment] = []
    for item in items:
        att = coerce_attachment(item)
        filename, content, content_type, size = _unpack(att)

        if size > MAX_ATTACHMENT_SIZE:
            raise ValidationError(
                f"File {filename} exceeds the maximum size of 7MB",
                ErrorCode.ATTACHMENT_TOO_LARGE,
            )

        if isinstance(content, (bytearray, memoryview)):
            content = bytes(content)
        if environment is Environment.BROWSER and isinstance(content, bytes):
            content = base64.b64encode(content).decode("ascii")

        processed.append(ProcessedAttachment(filename=filename, content=content, content_type=content_type))

    logger.debug("Normalized %d attachment(s) for %s", len(processed), environment.value)
    return processed
