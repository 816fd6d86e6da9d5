# metigan/__init__.py
from metigan.interface_adapters.client import Metigan
from metigan.domain.error_codes import ErrorCode, get_error_details
from metigan.domain.errors import (
    ApiError,
    ContactError,
    HttpFailure,
    MetiganError,
    NetworkError,
    ValidationError,
)
from metigan.domain.models import (
    BrowserFile,
    ContactOptions,
    GenericAttachment,
    ProcessedAttachment,
    RetryPolicy,
    ServerBuffer,
)

__version__ = "1.1.0"

__all__ = [
    "Metigan",
    "ErrorCode",
    "get_error_details",
    "MetiganError",
    "ValidationError",
    "ApiError",
    "NetworkError",
    "ContactError",
    "HttpFailure",
    "BrowserFile",
    "ServerBuffer",
    "GenericAttachment",
    "ProcessedAttachment",
    "ContactOptions",
    "RetryPolicy",
]
