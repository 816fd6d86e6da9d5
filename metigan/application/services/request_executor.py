# application/services/request_executor.py
from __future__ import annotations
import logging
import random
import time
from typing import Any, Callable, Dict

from metigan.domain.errors import HttpFailure
from metigan.domain.models import RequestDescriptor, RetryPolicy

logger = logging.getLogger(__name__)


def backoff_delay_ms(base_delay_ms: int, attempt: int, rand: Callable[[], float] = random.random) -> float:
    """
    Exponential backoff with jitter: base * 2^attempt * (0.5 + U[0, 0.5)).
    The result lies in [base*2^attempt*0.5, base*2^attempt).
    """
    return base_delay_ms * (2 ** attempt) * (0.5 + rand() * 0.5)


def classify_failure(failure: HttpFailure) -> str:
    if failure.status is None:
        return "network"
    if failure.status in (401, 403):
        return "auth"
    if failure.status >= 500:
        return "server"
    return "client"


class RequestExecutor:
    """
    Runs one logical request against the transport, retrying every failure
    until ``policy.max_attempts`` is reached. The last failure is re-raised as
    is; the caller turns it into an SDK error.
    """

    def __init__(
        self,
        transport: Any,
        *,
        api_key: str,
        policy: RetryPolicy,
        user_agent: str = "SDK",
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self.transport = transport
        self._api_key = api_key
        self.policy = policy
        self.user_agent = user_agent
        self._sleep = sleep
        self._rand = rand

    def _auth_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        # fresh mapping per attempt; auth always wins over caller headers
        return {
            **headers,
            "x-api-key": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "User-Agent": headers.get("User-Agent", self.user_agent),
        }

    def _send(self, descriptor: RequestDescriptor) -> Any:
        headers = self._auth_headers(descriptor.headers)
        method = descriptor.method
        if method == "GET":
            return self.transport.get(descriptor.url, headers)
        if method == "POST":
            return self.transport.post(descriptor.url, descriptor.body, headers)
        if method == "PUT":
            return self.transport.put(descriptor.url, descriptor.body, headers)
        return self.transport.delete(descriptor.url, headers)

    def execute(self, descriptor: RequestDescriptor) -> Any:
        attempts = self.policy.max_attempts
        for attempt in range(attempts):
            try:
                return self._send(descriptor)
            except HttpFailure as failure:
                kind = classify_failure(failure)
                logger.warning(
                    "Attempt %d/%d %s %s failed (%s, status=%s): %s",
                    attempt + 1, attempts, descriptor.method, descriptor.url,
                    kind, failure.status, failure.message,
                )
                if attempt == attempts - 1:
                    raise
                delay = backoff_delay_ms(self.policy.base_delay_ms, attempt, self._rand)
                if delay > 0:
                    self._sleep(delay / 1000.0)
        raise AssertionError("unreachable: retry loop exited without result")
