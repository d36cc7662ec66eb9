"""
Text helpers for navigational labels
"""
import re
from typing import Optional

_WHITESPACE = re.compile(r'\s+')


def make_excerpt(content: Optional[str], length: int = 100) -> str:
    """Collapse whitespace and cut to `length` chars, marking the cut with '...'"""
    if not content:
        return ""
    text = _WHITESPACE.sub(' ', content).strip()
    if len(text) <= length:
        return text
    return text[:length].rstrip() + '...'
