"""Lenient page / pageSize parsing for list endpoints."""

from __future__ import annotations

from typing import Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def _as_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def page_window(page: Optional[str], page_size: Optional[str]) -> tuple[int, int]:
    """
    Return ``(limit, offset)``.

    Missing, non-numeric or out-of-range values fall back to the defaults:
    ``page < 1`` -> 1 and ``pageSize <= 0`` -> 10.
    """
    p = _as_int(page)
    if p is None or p < 1:
        p = DEFAULT_PAGE
    size = _as_int(page_size)
    if size is None or size <= 0:
        size = DEFAULT_PAGE_SIZE
    return size, (p - 1) * size
