"""
Unit tests for environment-driven settings.
"""

import pytest

from metigan.config.settings import DEFAULT_BASE_URL, Settings

ENV_VARS = [
    "METIGAN_API_KEY",
    "METIGAN_BASE_URL",
    "METIGAN_USER_AGENT",
    "METIGAN_RETRY_COUNT",
    "METIGAN_RETRY_DELAY_MS",
    "METIGAN_TIMEOUT_MS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_defaults(self):
        st = Settings()

        assert st.API_KEY == ""
        assert st.base_url() == DEFAULT_BASE_URL
        assert st.USER_AGENT == "SDK"
        assert st.retry_policy().max_attempts == 3
        assert st.retry_policy().base_delay_ms == 1000
        assert st.timeout_seconds() == 30.0

    def test_reads_environment_at_construction(self, monkeypatch):
        monkeypatch.setenv("METIGAN_API_KEY", "from-env")
        monkeypatch.setenv("METIGAN_BASE_URL", "https://staging.test/api/")
        monkeypatch.setenv("METIGAN_RETRY_COUNT", "5")
        monkeypatch.setenv("METIGAN_RETRY_DELAY_MS", "250")
        monkeypatch.setenv("METIGAN_TIMEOUT_MS", "1500")

        st = Settings()

        assert st.API_KEY == "from-env"
        assert st.base_url() == "https://staging.test/api"
        assert st.retry_policy().max_attempts == 5
        assert st.retry_policy().base_delay_ms == 250
        assert st.timeout_seconds() == 1.5

    def test_empty_base_url_falls_back(self):
        assert Settings(BASE_URL="").base_url() == DEFAULT_BASE_URL

    def test_invalid_retry_count(self):
        with pytest.raises(ValueError):
            Settings(RETRY_COUNT="0").retry_policy()
