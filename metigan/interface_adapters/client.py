# interface_adapters/client.py
from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote, urlencode

from metigan.application.services.payload_strategy import select_strategy
from metigan.application.services.request_executor import RequestExecutor
from metigan.application.services.templates import TemplateFunction, create_template, generate_tracking_id
from metigan.application.services.validation import (
    extract_email_address,
    is_valid_email,
    validate_audience_id,
    validate_contact_emails,
    validate_message,
    validate_positive_int,
)
from metigan.config.settings import DEFAULT_BASE_URL, Settings
from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ContactError, HttpFailure, MetiganError, ValidationError, from_http_failure
from metigan.domain.models import ContactOptions, EmailMessage, RequestDescriptor, RetryPolicy
from metigan.infrastructure.http.http_client import HttpTransport
from metigan.infrastructure.runtime.environment import detect_environment

logger = logging.getLogger(__name__)


def _contact_options(value: ContactOptions | Mapping[str, Any] | None) -> Optional[ContactOptions]:
    if value is None or isinstance(value, ContactOptions):
        return value
    return ContactOptions(
        create_contact=bool(value.get("create_contact", False)),
        audience_id=value.get("audience_id") or "",
        contact_fields=dict(value.get("contact_fields") or {}),
    )


class Metigan:
    """
    Client for the Metigan email, contact and audience API.

    Every public method either returns the parsed response body or raises one
    MetiganError subclass. Input problems raise ValidationError before any
    request; transport and API problems surface once the retries are used up.
    """

    def __init__(
        self,
        api_key: str,
        *,
        retry_count: int = 3,
        retry_delay: int = 1000,
        timeout: int = 30000,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = "SDK",
        transport: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key:
            raise MetiganError("API key is required", ErrorCode.INVALID_API_KEY)
        try:
            self.policy = RetryPolicy(max_attempts=retry_count, base_delay_ms=retry_delay)
        except ValueError as exc:
            raise MetiganError(str(exc), ErrorCode.UNEXPECTED_ERROR) from exc

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport if transport is not None else HttpTransport(timeout=timeout / 1000.0)
        self._executor = RequestExecutor(
            self.transport,
            api_key=api_key,
            policy=self.policy,
            user_agent=user_agent,
            sleep=sleep,
        )

    @classmethod
    def from_env(cls, settings: Settings | None = None, **overrides: Any) -> "Metigan":
        st = settings or Settings()
        try:
            policy = st.retry_policy()
            timeout = int(st.TIMEOUT_MS)
        except ValueError as exc:
            raise MetiganError(f"Invalid METIGAN_* setting: {exc}", ErrorCode.UNEXPECTED_ERROR) from exc
        kwargs: Dict[str, Any] = {
            "retry_count": policy.max_attempts,
            "retry_delay": policy.base_delay_ms,
            "timeout": timeout,
            "base_url": st.base_url(),
            "user_agent": st.USER_AGENT,
        }
        kwargs.update(overrides)
        return cls(st.API_KEY, **kwargs)

    # ───────── plumbing ─────────
    def _url(self, path: str, **query: Any) -> str:
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in query.items() if v is not None}
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def _call(
        self,
        operation: str,
        descriptor: RequestDescriptor,
        contact_codes: Optional[Dict[int, ErrorCode]] = None,
    ) -> Any:
        try:
            return self._executor.execute(descriptor)
        except HttpFailure as failure:
            logger.error("%s failed after %d attempt(s): %s", operation, self.policy.max_attempts, failure.message)
            if contact_codes and failure.status in contact_codes:
                data = failure.data if isinstance(failure.data, dict) else {}
                raise ContactError.from_code(
                    contact_codes[failure.status],
                    data.get("message") or data.get("error"),
                ) from failure
            raise from_http_failure(failure) from failure
        except MetiganError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while %s", operation)
            raise MetiganError(
                f"An unexpected error occurred while {operation}",
                ErrorCode.UNEXPECTED_ERROR,
            ) from exc

    # ───────── emails ─────────
    def _send(self, msg: EmailMessage) -> Any:
        try:
            validate_message(msg)
            environment = detect_environment()
            body, headers = select_strategy(msg, environment).build(msg)
        except MetiganError:
            raise
        except Exception as exc:
            logger.exception("Could not build email payload")
            raise MetiganError(
                "An unexpected error occurred while sending email",
                ErrorCode.UNEXPECTED_ERROR,
            ) from exc
        descriptor = RequestDescriptor(url=self._url("/end/email"), method="POST", body=body, headers=headers)
        logger.info("Sending email to %d recipient(s) (%s)", len(msg.recipients), environment.value)
        return self._call("sending email", descriptor)

    def send_email(
        self,
        *,
        sender: str,
        recipients: Iterable[str],
        subject: str,
        content: str,
        attachments: Optional[Iterable[Any]] = None,
        cc: Optional[Iterable[str]] = None,
        bcc: Optional[Iterable[str]] = None,
        reply_to: str = "",
        tracking_id: str = "",
        contact_options: ContactOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        msg = EmailMessage(
            sender=sender,
            recipients=list(recipients or []),
            subject=subject,
            content=content,
            attachments=list(attachments or []),
            cc=list(cc or []),
            bcc=list(bcc or []),
            reply_to=reply_to,
            tracking_id=tracking_id,
            contact_options=_contact_options(contact_options),
        )
        return self._send(msg)

    def send_email_with_template(
        self,
        *,
        sender: str,
        recipients: Iterable[str],
        subject: str,
        template_id: str,
        template_variables: Optional[Mapping[str, Any]] = None,
        attachments: Optional[Iterable[Any]] = None,
        cc: Optional[Iterable[str]] = None,
        bcc: Optional[Iterable[str]] = None,
        reply_to: str = "",
        tracking_id: str = "",
        contact_options: ContactOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        if not template_id:
            raise ValidationError("Template ID is required", ErrorCode.INVALID_TEMPLATE)
        msg = EmailMessage(
            sender=sender,
            recipients=list(recipients or []),
            subject=subject,
            attachments=list(attachments or []),
            cc=list(cc or []),
            bcc=list(bcc or []),
            reply_to=reply_to,
            tracking_id=tracking_id,
            contact_options=_contact_options(contact_options),
            template_id=template_id,
            template_variables=dict(template_variables or {}),
        )
        return self._send(msg)

    # ───────── contacts ─────────
    def create_contacts(self, emails: List[str], options: ContactOptions | Mapping[str, Any]) -> Any:
        opts = _contact_options(options)
        if not opts or not opts.create_contact:
            raise ValidationError("create_contact must be enabled to create contacts", ErrorCode.MISSING_REQUIRED_FIELD)
        validate_audience_id(opts.audience_id)
        validate_contact_emails(emails)

        body = {"emails": list(emails), "audienceId": opts.audience_id, "fields": dict(opts.contact_fields)}
        descriptor = RequestDescriptor(
            url=self._url("/end/contacts"),
            method="POST",
            body=body,
            headers={"Content-Type": "application/json"},
        )
        return self._call("creating contacts", descriptor, {409: ErrorCode.CONTACT_ALREADY_EXISTS})

    def get_contact(self, email: str, audience_id: str) -> Any:
        validate_contact_emails([email])
        validate_audience_id(audience_id)
        descriptor = RequestDescriptor(
            url=self._url(f"/end/contacts/{quote(email, safe='')}", audienceId=audience_id),
            method="GET",
        )
        return self._call("fetching contact", descriptor, {404: ErrorCode.CONTACT_NOT_FOUND})

    def list_contacts(self, audience_id: str, *, page: Optional[int] = None, limit: Optional[int] = None) -> Any:
        validate_audience_id(audience_id)
        validate_positive_int(page, "page")
        validate_positive_int(limit, "limit")
        descriptor = RequestDescriptor(
            url=self._url("/end/contacts", audienceId=audience_id, page=page, limit=limit),
            method="GET",
        )
        return self._call("listing contacts", descriptor)

    def update_contact(self, email: str, *, audience_id: str, fields: Mapping[str, Any]) -> Any:
        validate_contact_emails([email])
        validate_audience_id(audience_id)
        if not fields:
            raise ValidationError("Fields to update are required", ErrorCode.MISSING_REQUIRED_FIELD)
        descriptor = RequestDescriptor(
            url=self._url("/end/contacts"),
            method="PUT",
            body={"email": email, "audienceId": audience_id, "fields": dict(fields)},
            headers={"Content-Type": "application/json"},
        )
        return self._call(
            "updating contact",
            descriptor,
            {404: ErrorCode.CONTACT_NOT_FOUND, 409: ErrorCode.CONTACT_UPDATE_FAILED},
        )

    def delete_contact(self, email: str, audience_id: str) -> Any:
        validate_contact_emails([email])
        validate_audience_id(audience_id)
        descriptor = RequestDescriptor(
            url=self._url(f"/end/contacts/{quote(email, safe='')}", audienceId=audience_id),
            method="DELETE",
        )
        return self._call("deleting contact", descriptor, {404: ErrorCode.CONTACT_DELETE_FAILED})

    # ───────── audiences ─────────
    def create_audience(self, name: str, description: Optional[str] = None) -> Any:
        if not name:
            raise ValidationError("Audience name is required", ErrorCode.MISSING_REQUIRED_FIELD)
        body: Dict[str, Any] = {"name": name}
        if description:
            body["description"] = description
        descriptor = RequestDescriptor(
            url=self._url("/end/audiences"),
            method="POST",
            body=body,
            headers={"Content-Type": "application/json"},
        )
        return self._call("creating audience", descriptor)

    def get_audiences(self) -> Any:
        return self._call("listing audiences", RequestDescriptor(url=self._url("/end/audiences"), method="GET"))

    def get_audience(self, audience_id: str) -> Any:
        validate_audience_id(audience_id)
        descriptor = RequestDescriptor(url=self._url(f"/end/audiences/{quote(audience_id, safe='')}"), method="GET")
        return self._call("fetching audience", descriptor)

    def update_audience(self, audience_id: str, *, name: Optional[str] = None, description: Optional[str] = None) -> Any:
        validate_audience_id(audience_id)
        body = {k: v for k, v in (("name", name), ("description", description)) if v is not None}
        if not body:
            raise ValidationError("Nothing to update: pass name and/or description", ErrorCode.MISSING_REQUIRED_FIELD)
        descriptor = RequestDescriptor(
            url=self._url(f"/end/audiences/{quote(audience_id, safe='')}"),
            method="PUT",
            body=body,
            headers={"Content-Type": "application/json"},
        )
        return self._call("updating audience", descriptor)

    def delete_audience(self, audience_id: str) -> Any:
        validate_audience_id(audience_id)
        descriptor = RequestDescriptor(url=self._url(f"/end/audiences/{quote(audience_id, safe='')}"), method="DELETE")
        return self._call("deleting audience", descriptor)

    # ───────── helpers ─────────
    @staticmethod
    def create_template(html: str) -> TemplateFunction:
        return create_template(html)

    @staticmethod
    def generate_tracking_id() -> str:
        return generate_tracking_id()

    @staticmethod
    def validate_email(email: Any) -> bool:
        return is_valid_email(extract_email_address(email) if isinstance(email, str) else email)
