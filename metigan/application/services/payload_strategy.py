# application/services/payload_strategy.py
from __future__ import annotations
import base64
import json
from typing import Any, Dict, Protocol, Tuple

from metigan.application.services.attachment_normalizer import (
    MAX_ATTACHMENT_SIZE,
    mime_type_for,
    normalize_attachments,
)
from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ValidationError
from metigan.domain.models import BrowserFile, EmailMessage, Environment, MultipartBody, ProcessedAttachment


class PayloadStrategy(Protocol):
    def build(self, message: EmailMessage) -> Tuple[Any, Dict[str, str]]:
        """-> (body, extra headers)"""
        ...


def _wire_attachment(att: ProcessedAttachment) -> Dict[str, Any]:
    record = att.to_wire()
    # deferred encoding: raw bytes from the server path are base64'd here
    if isinstance(record["content"], bytes):
        record["content"] = base64.b64encode(record["content"]).decode("ascii")
    return record


class JsonPayloadStrategy:
    """JSON body; attachments go through the normalizer."""

    def __init__(self, environment: Environment = Environment.SERVER) -> None:
        self.environment = environment

    def build(self, message: EmailMessage) -> Tuple[Dict[str, Any], Dict[str, str]]:
        body = message.base_fields()
        if message.attachments:
            processed = normalize_attachments(message.attachments, self.environment)
            body["attachments"] = [_wire_attachment(a) for a in processed]
        return body, {"Content-Type": "application/json"}


class MultipartPayloadStrategy:
    """Multipart form; native file handles are sent as ``files`` parts."""

    def build(self, message: EmailMessage) -> Tuple[MultipartBody, Dict[str, str]]:
        fields: Dict[str, str] = {}
        for key, value in message.base_fields().items():
            if isinstance(value, (list, dict)):
                fields[key] = json.dumps(value, ensure_ascii=False)
            elif isinstance(value, bool):
                fields[key] = "true" if value else "false"
            else:
                fields[key] = str(value)

        body = MultipartBody(fields=fields)
        for item in message.attachments:
            if not isinstance(item, BrowserFile):
                raise ValidationError(
                    "In browser environments, attachments must be File objects",
                    ErrorCode.INVALID_ATTACHMENT,
                )
            if item.size > MAX_ATTACHMENT_SIZE:
                raise ValidationError(
                    f"File {item.name} exceeds the maximum size of 7MB",
                    ErrorCode.ATTACHMENT_TOO_LARGE,
                )
            body.files.append(("files", (item.name, item.content, item.type or mime_type_for(item.name))))
        return body, {}


def select_strategy(message: EmailMessage, environment: Environment) -> PayloadStrategy:
    if environment is Environment.BROWSER and message.attachments:
        return MultipartPayloadStrategy()
    return JsonPayloadStrategy(environment)
