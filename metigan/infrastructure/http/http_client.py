# infrastructure/http/http_client.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import requests

from metigan.domain.errors import HttpFailure
from metigan.domain.models import MultipartBody

logger = logging.getLogger(__name__)


class HttpTransport:
    """
    The four verbs the executor consumes. Returns the parsed body on 2xx and
    raises HttpFailure on anything else; it never retries by itself.
    """

    def __init__(self, *, timeout: float = 30.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        # requests.Session and the requests module share the .request() signature
        self._http = session if session is not None else requests

    # ───────── verbs ─────────
    def get(self, url: str, headers: Dict[str, str]) -> Any:
        return self._request("GET", url, headers)

    def post(self, url: str, body: Any, headers: Dict[str, str]) -> Any:
        return self._request("POST", url, headers, body)

    def put(self, url: str, body: Any, headers: Dict[str, str]) -> Any:
        return self._request("PUT", url, headers, body)

    def delete(self, url: str, headers: Dict[str, str]) -> Any:
        return self._request("DELETE", url, headers)

    # ───────── helpers ─────────
    def _request(self, method: str, url: str, headers: Dict[str, str], body: Any = None) -> Any:
        kwargs: Dict[str, Any] = {"headers": dict(headers), "timeout": self.timeout}
        if isinstance(body, MultipartBody):
            # requests writes its own multipart Content-Type with the boundary
            kwargs["headers"] = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            kwargs["data"] = body.fields
            kwargs["files"] = body.files
        elif body is not None:
            kwargs["json"] = body

        logger.debug("%s %s", method, url)
        try:
            r = self._http.request(method, url, **kwargs)
        except requests.Timeout as exc:
            raise HttpFailure(f"Request timed out: {exc}", timeout=True) from exc
        except requests.RequestException as exc:
            raise HttpFailure(f"Network error: {exc}") from exc

        data = _parse_body(r)
        if not 200 <= r.status_code < 300:
            raise HttpFailure(
                f"Request failed with status {r.status_code}",
                status=r.status_code,
                data=data,
            )
        return data


def _parse_body(r: requests.Response) -> Any:
    if not r.text:
        return None
    media_type = r.headers.get("Content-Type", "").split(";")[0].strip().lower()
    # application/json, application/problem+json, ...
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            return r.json()
        except ValueError:
            logger.warning("Invalid JSON body from %s (status=%s)", r.url, r.status_code)
    return r.text
