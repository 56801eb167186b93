"""
Report Sorting

Resolves a client-supplied sort key against a module's allow-list of
sortable expressions. Unknown keys fall back to the module default, so the
ORDER BY clause never contains user text.
"""

from dataclasses import dataclass
from typing import Mapping, Optional


ASC = "ASC"
DESC = "DESC"


@dataclass(frozen=True)
class OrderBy:
    """Resolved ordering: trusted expression, direction and a stable tie-breaker"""
    key: str
    expression: str
    direction: str = DESC
    tiebreaker: Optional[str] = None

    @property
    def sql(self) -> str:
        """Complete ORDER BY clause"""
        clause = f"ORDER BY {self.expression} {self.direction}"
        if self.tiebreaker and self.tiebreaker != self.expression:
            clause += f", {self.tiebreaker} {self.direction}"
        return clause


def normalize_direction(value: Optional[str]) -> str:
    """'asc' (any case) sorts ascending; everything else descending"""
    return ASC if str(value or "").strip().lower() == "asc" else DESC


def resolve_sort(
    sort_map: Mapping[str, str],
    default_key: str,
    key: Optional[str] = None,
    direction: Optional[str] = None,
    tiebreaker: Optional[str] = None
) -> OrderBy:
    """
    Resolve a sort request to an OrderBy.

    Args:
        sort_map: Allowed sort keys mapped to SQL expressions (columns or
            window-total aliases)
        default_key: Key used when the requested one is missing or unknown
        key: Requested sort key (trimmed, case-insensitive)
        direction: Requested direction ('asc' or 'desc')
        tiebreaker: Unique column appended so rows sharing a sort value keep
            a stable order across pages

    Returns:
        OrderBy whose expression is always taken from sort_map
    """
    requested = str(key or "").strip().lower()
    resolved = requested if requested in sort_map else default_key

    return OrderBy(
        key=resolved,
        expression=sort_map[resolved],
        direction=normalize_direction(direction),
        tiebreaker=tiebreaker
    )
