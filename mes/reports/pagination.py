"""
Report Pagination

Lenient parsing and clamping of page/pageSize values. Malformed input never
raises; it falls back to defaults and is clamped into range.
"""

import math
from dataclasses import dataclass
from typing import Any


def to_int(value: Any, fallback: int) -> int:
    """
    Parse a query value as an integer.

    Accepts integers, decimal strings ("12.7" -> 12) and exponent forms;
    anything empty, non-numeric or non-finite yields the fallback.
    """
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(str(value).strip())
    except ValueError:
        return fallback
    if not math.isfinite(number):
        return fallback
    return int(number)


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high]"""
    return max(low, min(high, value))


def total_pages(total_count: int, page_size: int) -> int:
    """Number of pages needed for total_count rows (0 when there are none)"""
    if page_size <= 0:
        return 0
    return math.ceil(total_count / page_size)


@dataclass(frozen=True)
class PageRequest:
    """A clamped page request"""
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    @classmethod
    def from_params(
        cls,
        page: Any,
        page_size: Any,
        default_size: int,
        min_size: int = 10,
        max_size: int = 500,
        max_page: int = 1_000_000
    ) -> "PageRequest":
        """Build a request from raw query values, clamping both into range"""
        return cls(
            page=clamp(to_int(page, 1), 1, max_page),
            page_size=clamp(to_int(page_size, default_size), min_size, max_size)
        )
