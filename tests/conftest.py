import sys
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from metigan import Metigan

API_KEY = "test-api-key"


@pytest.fixture
def transport():
    """Stand-in for HttpTransport: the four verbs as mocks."""
    return Mock(spec=["get", "post", "put", "delete"])


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(transport, sleeps):
    return Metigan(API_KEY, retry_count=1, retry_delay=10, transport=transport, sleep=sleeps.append)


@pytest.fixture
def browser(monkeypatch):
    """Pretend to run inside a browser runtime exposing window/FormData/File."""
    scope = SimpleNamespace(window=object(), FormData=object(), File=object())
    monkeypatch.setitem(sys.modules, "js", scope)
    return scope


@pytest.fixture(autouse=True)
def no_js_module(monkeypatch):
    monkeypatch.delitem(sys.modules, "js", raising=False)
