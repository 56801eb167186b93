"""
Report Aggregates

Window-function partition totals attached to every row, and the grand-totals
query run over the whole filtered set. Category-gated sums compare against
hard-coded lowercase literals only.
"""

from dataclasses import dataclass
from typing import Tuple, Optional, Sequence, Dict, Any


def sql_literal(value: str) -> str:
    """Quote a trusted string constant for inline SQL"""
    return "'" + value.replace("'", "''") + "'"


def _summed_value(value_column: str, category_column: Optional[str], category_values: Tuple[str, ...]) -> str:
    """The value expression, wrapped in a CASE gate when restricted to categories"""
    value = f"COALESCE({value_column}, 0)"
    if not category_column:
        return value
    literals = ", ".join(sql_literal(v.lower()) for v in category_values)
    return f"CASE WHEN LOWER(COALESCE({category_column}, '')) IN ({literals}) THEN {value} ELSE 0 END"


@dataclass(frozen=True)
class WindowTotal:
    """
    Per-row partition total.

    Renders as:
        COALESCE(SUM(<value>) OVER (PARTITION BY <cols>), 0) AS <alias>
    where <value> is gated by a CASE expression when category_column is set.
    """
    alias: str
    value_column: str
    partition_by: Tuple[str, ...]
    category_column: Optional[str] = None
    category_values: Tuple[str, ...] = ()

    def sql(self) -> str:
        value = _summed_value(self.value_column, self.category_column, self.category_values)
        partition = ", ".join(self.partition_by)
        return f"COALESCE(SUM({value}) OVER (PARTITION BY {partition}), 0) AS {self.alias}"


@dataclass(frozen=True)
class GrandTotal:
    """Sum over the filtered set: COALESCE(SUM(<value>), 0) AS <alias>"""
    alias: str
    value_column: str
    category_column: Optional[str] = None
    category_values: Tuple[str, ...] = ()

    def sql(self) -> str:
        value = _summed_value(self.value_column, self.category_column, self.category_values)
        return f"COALESCE(SUM({value}), 0) AS {self.alias}"


def build_window_select(totals: Sequence[WindowTotal]) -> str:
    """SELECT-list fragment for the window totals"""
    return ",\n    ".join(t.sql() for t in totals)


def build_totals_select(totals: Sequence[GrandTotal]) -> str:
    """SELECT-list fragment for the grand totals"""
    return ",\n    ".join(t.sql() for t in totals)


def empty_totals(totals: Sequence[GrandTotal]) -> Dict[str, Any]:
    """Zero for every grand total, used when the totals query yields nothing"""
    return {t.alias: 0 for t in totals}
