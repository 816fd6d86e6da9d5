# config/settings.py
from __future__ import annotations
from dataclasses import dataclass, field
import os
from dotenv import load_dotenv

from metigan.domain.models import RetryPolicy

load_dotenv()

DEFAULT_BASE_URL = "https://metigan-emails-api.savanapoint.com/api"


def _env(name: str, default: str):
    # read when Settings() is built, not when this module is imported
    return field(default_factory=lambda: os.getenv(name, default))


@dataclass(frozen=True)
class Settings:
    API_KEY: str = _env("METIGAN_API_KEY", "")
    BASE_URL: str = _env("METIGAN_BASE_URL", DEFAULT_BASE_URL)
    USER_AGENT: str = _env("METIGAN_USER_AGENT", "SDK")

    # Retry / timeouts (ms, same units as the client options)
    RETRY_COUNT: str = _env("METIGAN_RETRY_COUNT", "3")
    RETRY_DELAY_MS: str = _env("METIGAN_RETRY_DELAY_MS", "1000")
    TIMEOUT_MS: str = _env("METIGAN_TIMEOUT_MS", "30000")

    # ───────── helpers ─────────
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=int(self.RETRY_COUNT), base_delay_ms=int(self.RETRY_DELAY_MS))

    def timeout_seconds(self) -> float:
        return int(self.TIMEOUT_MS) / 1000.0

    def base_url(self) -> str:
        return (self.BASE_URL or DEFAULT_BASE_URL).rstrip("/")
