# domain/models.py
from __future__ import annotations
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")


class Environment(str, Enum):
    BROWSER = "browser"
    SERVER = "server"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError(f"max_attempts must be an integer >= 1, got {self.max_attempts!r}")
        if isinstance(self.base_delay_ms, bool) or not isinstance(self.base_delay_ms, int) or self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be an integer >= 0, got {self.base_delay_ms!r}")


@dataclass
class RequestDescriptor:
    url: str
    method: HttpMethod = "GET"
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method!r}")


# ───────── attachments ─────────
@dataclass
class BrowserFile:
    """Native file handle handed over by a browser runtime."""
    name: str
    content: bytes
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class ServerBuffer:
    buffer: bytes
    originalname: str
    mimetype: str = ""


@dataclass
class GenericAttachment:
    content: bytes | bytearray | memoryview | str
    filename: str
    content_type: str = ""


AttachmentInput = Union[BrowserFile, ServerBuffer, GenericAttachment]


@dataclass
class ProcessedAttachment:
    filename: str
    content: bytes | str
    content_type: str
    encoding: str = "base64"
    disposition: str = "attachment"

    def to_wire(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "content": self.content,
            "contentType": self.content_type,
            "encoding": self.encoding,
            "disposition": self.disposition,
        }


@dataclass
class MultipartBody:
    """Form fields plus ``files`` parts, in the shape ``requests`` expects."""
    fields: dict[str, str] = field(default_factory=dict)
    files: list[tuple[str, tuple[str, bytes, str]]] = field(default_factory=list)


# ───────── email / contacts ─────────
@dataclass
class ContactOptions:
    create_contact: bool = False
    audience_id: str = ""
    contact_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class EmailMessage:
    sender: str
    recipients: list[str]
    subject: str
    content: str = ""
    attachments: list[Any] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    reply_to: str = ""
    tracking_id: str = ""
    contact_options: ContactOptions | None = None
    template_id: str = ""
    template_variables: dict[str, Any] = field(default_factory=dict)

    def base_fields(self) -> dict[str, Any]:
        """JSON fields shared by every send path, attachments excluded."""
        data: dict[str, Any] = {
            "from": self.sender,
            "recipients": list(self.recipients),
            "subject": self.subject,
        }
        if self.template_id:
            data["useTemplate"] = "true"
            data["templateId"] = self.template_id
            data["templateVariables"] = json.dumps(self.template_variables, ensure_ascii=False)
        else:
            data["content"] = self.content
        if self.cc:
            data["cc"] = list(self.cc)
        if self.bcc:
            data["bcc"] = list(self.bcc)
        if self.reply_to:
            data["replyTo"] = self.reply_to
        if self.contact_options and self.contact_options.create_contact:
            data["createContact"] = True
            data["audienceId"] = self.contact_options.audience_id
            if self.contact_options.contact_fields:
                data["contactFields"] = dict(self.contact_options.contact_fields)
        if self.tracking_id:
            data["trackingId"] = self.tracking_id
        return data
