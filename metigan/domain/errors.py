# domain/errors.py
from __future__ import annotations
from typing import Any

from metigan.domain.error_codes import ErrorCode, STATUS_CODES, get_error_details


class HttpFailure(Exception):
    """
    Raw failure reported by the transport: a non-2xx answer (``status`` set)
    or a transport-level error such as a timeout or a refused connection
    (``status`` is None). Only the retry loop and the client see it.
    """

    def __init__(self, message: str, *, status: int | None = None, data: Any = None, timeout: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"HttpFailure(status={self.status!r}, message={self.message!r})"


class MetiganError(Exception):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNEXPECTED_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def formatted_message(self) -> str:
        prefix = f"MET-{int(self.code)}"
        if self.message.startswith(prefix):
            return self.message
        return f"{prefix}: {self.message}"

    @classmethod
    def from_code(cls, code: ErrorCode, context: str | None = None) -> "MetiganError":
        return cls(get_error_details(code, context), code)


class ValidationError(MetiganError):
    """Input rejected before any request was attempted."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.MISSING_REQUIRED_FIELD) -> None:
        super().__init__(message, code)


class ApiError(MetiganError):
    """The API answered with a non-success status."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.API_REQUEST_FAILED, status: int | None = None) -> None:
        super().__init__(message, code)
        self.status = status

    @classmethod
    def from_status(cls, status: int, context: str | None = None) -> "ApiError":
        code = STATUS_CODES.get(status, ErrorCode.API_REQUEST_FAILED)
        return cls(get_error_details(code, context), code, status)


class NetworkError(MetiganError):
    """No response was received (timeout, DNS, refused connection)."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.NETWORK_ERROR) -> None:
        super().__init__(message, code)


class ContactError(MetiganError):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.CONTACT_NOT_FOUND) -> None:
        super().__init__(message, code)


def from_http_failure(failure: HttpFailure) -> MetiganError:
    """
    Convert the failure left over after the retry loop into the SDK taxonomy.
    The server's ``message`` wins over its ``error`` field as context.
    """
    if failure.status is None:
        if failure.timeout:
            return NetworkError("Request timed out. Please check your network connection.", ErrorCode.TIMEOUT)
        return NetworkError("Network error. Please check your internet connection.", ErrorCode.NETWORK_ERROR)

    data = failure.data if isinstance(failure.data, dict) else {}
    context = data.get("message") or data.get("error") or f"Request failed with status {failure.status}"
    return ApiError.from_status(failure.status, str(context))
