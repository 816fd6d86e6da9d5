# infrastructure/filesystem/attachments.py
from __future__ import annotations
from pathlib import Path

from metigan.application.services.attachment_normalizer import mime_type_for
from metigan.domain.models import ServerBuffer


def load_attachment(path: Path | str) -> ServerBuffer:
    """Read a file from disk into a ServerBuffer named after the file."""
    fp = Path(path).resolve()
    return ServerBuffer(buffer=fp.read_bytes(), originalname=fp.name, mimetype=mime_type_for(fp.name))
