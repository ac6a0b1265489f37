from __future__ import annotations

import re

WHITESPACE_RE = re.compile(r'\s+')
ELLIPSIS = '...'


def body_preview(body: str | None, max_len: int) -> str:
    """Single-line excerpt of a comment body for audit events and listings.

    Runs of whitespace (newlines included) collapse to one space. Bodies longer
    than ``max_len`` are cut back to the last word boundary and end in ``...``.
    """
    flat = WHITESPACE_RE.sub(' ', body or '').strip()
    if len(flat) <= max_len:
        return flat
    if max_len <= len(ELLIPSIS):
        return flat[:max_len]
    cut = flat[: max_len - len(ELLIPSIS)]
    if ' ' in cut:
        cut = cut.rsplit(' ', 1)[0]
    return cut.rstrip() + ELLIPSIS
