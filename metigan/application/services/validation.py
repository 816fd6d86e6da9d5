# application/services/validation.py
from __future__ import annotations
import re
from typing import Any, Iterable

from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ValidationError
from metigan.domain.models import ContactOptions, EmailMessage

_ANGLE = re.compile(r"<([^>]+)>")


def is_valid_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    parts = email.split("@")
    if len(parts) != 2 or not parts[0]:
        return False
    domain = parts[1].split(".")
    if len(domain) < 2:
        return False
    return all(domain)


def extract_email_address(value: Any) -> str:
    """'Name <a@b.com>' -> 'a@b.com'; anything else is just stripped."""
    if not value or not isinstance(value, str):
        return ""
    m = _ANGLE.search(value)
    if m:
        return m.group(1).strip()
    return value.strip()


def _check_addresses(values: Iterable[str], label: str, code: ErrorCode) -> None:
    for value in values:
        email = extract_email_address(value)
        if not is_valid_email(email):
            raise ValidationError(f"Invalid {label} email format: {email or value!r}", code)


def validate_contact_options(options: ContactOptions | None) -> None:
    if options and options.create_contact and not options.audience_id:
        raise ValidationError(
            "Audience ID is required when creating contacts",
            ErrorCode.INVALID_AUDIENCE_ID,
        )


def validate_message(msg: EmailMessage) -> None:
    """Raise ValidationError on the first problem found; nothing is sent before this passes."""
    if not msg.sender:
        raise ValidationError("Sender email (from) is required", ErrorCode.MISSING_REQUIRED_FIELD)
    if not msg.recipients or not isinstance(msg.recipients, (list, tuple)):
        raise ValidationError("Recipients must be a non-empty list", ErrorCode.MISSING_REQUIRED_FIELD)
    if not msg.subject:
        raise ValidationError("Subject is required", ErrorCode.MISSING_REQUIRED_FIELD)
    if msg.template_id:
        if not isinstance(msg.template_variables, dict):
            raise ValidationError("Template variables must be a mapping", ErrorCode.INVALID_TEMPLATE_VARIABLES)
    elif not msg.content:
        raise ValidationError("Content is required", ErrorCode.MISSING_REQUIRED_FIELD)

    sender = extract_email_address(msg.sender)
    if not is_valid_email(sender):
        raise ValidationError(f"Invalid sender email format: {sender}", ErrorCode.INVALID_EMAIL_FORMAT)

    _check_addresses(msg.recipients, "recipient", ErrorCode.INVALID_RECIPIENT)
    _check_addresses(msg.cc, "CC", ErrorCode.INVALID_RECIPIENT)
    _check_addresses(msg.bcc, "BCC", ErrorCode.INVALID_RECIPIENT)
    if msg.reply_to:
        _check_addresses([msg.reply_to], "reply-to", ErrorCode.INVALID_EMAIL_FORMAT)

    validate_contact_options(msg.contact_options)


def validate_contact_emails(emails: Any) -> None:
    if not emails or not isinstance(emails, (list, tuple)):
        raise ValidationError("Emails must be a non-empty list", ErrorCode.MISSING_REQUIRED_FIELD)
    _check_addresses(emails, "contact", ErrorCode.INVALID_EMAIL_FORMAT)


def validate_audience_id(audience_id: Any) -> None:
    if not audience_id or not isinstance(audience_id, str):
        raise ValidationError("Audience ID is required", ErrorCode.INVALID_AUDIENCE_ID)


def validate_positive_int(value: Any, name: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer", ErrorCode.MISSING_REQUIRED_FIELD)
