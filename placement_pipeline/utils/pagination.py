"""Offset pagination helpers for list endpoints."""

import math
from typing import Tuple


def page_bounds(page: int, limit: int) -> Tuple[int, int]:
    """Return (offset, limit) for a 1-based page number."""
    return (page - 1) * limit, limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
