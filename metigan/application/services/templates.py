# application/services/templates.py
from __future__ import annotations
import itertools
import random
import re
import time
from typing import Any, Callable, Mapping, Optional

from metigan.domain.error_codes import ErrorCode
from metigan.domain.errors import ValidationError

TemplateVariables = Mapping[str, Any]
TemplateFunction = Callable[[Optional[TemplateVariables]], str]

_PLACEHOLDER = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")

# consecutive ids never share their 4-digit suffix
_suffix = itertools.count(random.randint(0, 9999))


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def create_template(html: str) -> TemplateFunction:
    """
    Return a function that fills ``{{ name }}`` placeholders of *html*.
    Placeholders without a value are left untouched.
    """
    if not html:
        raise ValidationError("Template content is required", ErrorCode.INVALID_TEMPLATE)

    def render(variables: Optional[TemplateVariables] = None) -> str:
        if not variables:
            return html

        def _sub(m: re.Match) -> str:
            key = m.group(1)
            if key in variables:
                return _render_value(variables[key])
            return m.group(0)

        return _PLACEHOLDER.sub(_sub, html)

    return render


def generate_tracking_id() -> str:
    """mtg-<epoch ms>-<4 random digits>"""
    return f"mtg-{int(time.time() * 1000)}-{next(_suffix) % 10000:04d}"
