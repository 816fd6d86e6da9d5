# infrastructure/runtime/environment.py
from __future__ import annotations
import sys
from typing import Any

from metigan.domain.models import Environment

# page marker, multipart form builder, native file handle
BROWSER_CAPABILITIES: tuple[str, ...] = ("window", "FormData", "File")


def _js_scope() -> Any:
    """
    Global JS scope exposed by browser runtimes (Pyodide) as the ``js``
    module, registered in sys.modules at startup. CPython never has it.
    """
    return sys.modules.get("js")


def detect_environment() -> Environment:
    scope = _js_scope()
    if scope is None:
        return Environment.SERVER
    if all(getattr(scope, name, None) is not None for name in BROWSER_CAPABILITIES):
        return Environment.BROWSER
    return Environment.SERVER


def is_browser() -> bool:
    return detect_environment() is Environment.BROWSER
