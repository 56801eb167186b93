"""
Report Filters

Filtering utilities for reports providing reusable functions for building SQL
WHERE clauses. Column names only ever come from the FilterField definitions
in the module registry; user input is bound as '?' parameters. Every builder
is pure and returns an immutable WhereClause.
"""

import re
from datetime import date, timedelta
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple, Any, Mapping, Sequence


TRUE_VALUES = frozenset({'true', '1', 'yes'})
FALSE_VALUES = frozenset({'false', '0', 'no'})
YMD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class FilterMode(Enum):
    """How a filter value is compared against its column"""
    CONTAINS = "contains"            # case-insensitive substring on text
    CONTAINS_TEXT = "contains_text"  # substring on a numeric/date column cast to text
    BOOLEAN = "boolean"              # exact match on a boolean column


@dataclass(frozen=True)
class FilterField:
    """An allow-listed filter: query-string name, trusted column, comparison mode"""
    param: str
    column: str
    mode: FilterMode = FilterMode.CONTAINS

    def condition(self) -> str:
        """SQL condition with a single '?' placeholder"""
        if self.mode == FilterMode.BOOLEAN:
            return f"{self.column} = ?"
        if self.mode == FilterMode.CONTAINS_TEXT:
            return f"LOWER(CAST({self.column} AS TEXT)) LIKE ?"
        return f"LOWER(COALESCE({self.column}, '')) LIKE ?"

    def bind(self, raw_value: Optional[str]) -> Optional[Any]:
        """Convert a raw query value to its parameter, or None to drop it"""
        if raw_value is None:
            return None
        value = str(raw_value).strip()
        if not value:
            return None
        if self.mode == FilterMode.BOOLEAN:
            return parse_bool_filter(value)
        return like_pattern(value)


@dataclass(frozen=True)
class WhereClause:
    """Immutable predicate: AND-ed conditions plus positional parameters"""
    conditions: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()

    @property
    def predicate(self) -> str:
        """Conditions joined with AND (empty string when unconstrained)"""
        return " AND ".join(self.conditions)

    @property
    def sql(self) -> str:
        """Complete WHERE clause, or empty string when there are no conditions"""
        return f"WHERE {self.predicate}" if self.conditions else ""

    def __bool__(self) -> bool:
        return bool(self.conditions)

    @classmethod
    def combine(cls, *clauses: "WhereClause") -> "WhereClause":
        """AND several clauses together, keeping parameter order"""
        conditions: Tuple[str, ...] = ()
        params: Tuple[Any, ...] = ()
        for clause in clauses:
            conditions += clause.conditions
            params += clause.params
        return cls(conditions, params)


def parse_bool_filter(value: Optional[str]) -> Optional[bool]:
    """
    Parse a boolean filter value.

    Accepts true/1/yes and false/0/no in any case; anything else is None,
    meaning "no constraint".
    """
    if value is None:
        return None
    s = str(value).strip().lower()
    if s in TRUE_VALUES:
        return True
    if s in FALSE_VALUES:
        return False
    return None


def parse_iso_date(value: Optional[str]) -> Optional[str]:
    """Return the value as a canonical YYYY-MM-DD string, or None if absent/malformed"""
    value = str(value or "").strip()
    if not YMD_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        return None


def like_pattern(value: str) -> str:
    """Substring LIKE pattern, lowercased to pair with LOWER(column)"""
    return f"%{value.lower()}%"


def build_date_filter(
    date_column: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    show_all: bool = False,
    today: Optional[date] = None,
    window_days: int = 30
) -> WhereClause:
    """
    Build the date-range predicate for a report.

    Args:
        date_column: Trusted date column (e.g. "e.shift_date")
        start_date: Inclusive start (YYYY-MM-DD)
        end_date: Inclusive end (YYYY-MM-DD)
        show_all: Skip date filtering entirely
        today: Reference date for the default window
        window_days: Size of the default window

    Returns:
        WhereClause; when neither bound is given the window is
        [today - window_days, today].
        Example: (("e.shift_date >= ?", "e.shift_date <= ?"), ("2024-01-01", "2024-12-31"))
    """
    if show_all:
        return WhereClause()

    conditions = []
    params = []

    if start_date:
        conditions.append(f"{date_column} >= ?")
        params.append(start_date)
    if end_date:
        conditions.append(f"{date_column} <= ?")
        params.append(end_date)

    if not start_date and not end_date:
        today = today or date.today()
        conditions.append(f"{date_column} >= ?")
        params.append((today - timedelta(days=window_days)).isoformat())
        conditions.append(f"{date_column} <= ?")
        params.append(today.isoformat())

    return WhereClause(tuple(conditions), tuple(params))


def build_search_clause(search_fields: Sequence[FilterField], q: Optional[str]) -> WhereClause:
    """
    Build the free-text search group.

    One parenthesised OR group across every search field, each with its own
    parameter. Numeric fields match by substring of their text form, so
    "7" matches anywhere in a sales order number.
    """
    q = (q or "").strip()
    if not q or not search_fields:
        return WhereClause()

    pattern = like_pattern(q)
    # Boolean columns have no meaningful substring form
    fields = [f for f in search_fields if f.mode != FilterMode.BOOLEAN]
    group = "(" + " OR ".join(f.condition() for f in fields) + ")"
    return WhereClause((group,), tuple(pattern for _ in fields))


def build_field_filters(
    filter_fields: Sequence[FilterField],
    values: Mapping[str, Optional[str]]
) -> WhereClause:
    """
    Build per-field filters from raw values.

    Only keys that match an allow-listed FilterField are considered; empty
    values and unparseable booleans are dropped silently.
    """
    conditions = []
    params = []

    for field in filter_fields:
        bound = field.bind(values.get(field.param))
        if bound is None:
            continue
        conditions.append(field.condition())
        params.append(bound)

    return WhereClause(tuple(conditions), tuple(params))
