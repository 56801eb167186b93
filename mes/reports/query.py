"""
Report Query Composition

ReportQuery captures the parsed request for one report; ReportSQL turns it,
together with the module definition, into the base, count, totals and paged
statements. All four statements share one WHERE clause object, so their
predicates and parameter lists are identical by construction.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

from ..config import config
from .filters import (
    WhereClause,
    parse_iso_date,
    build_date_filter,
    build_search_clause,
    build_field_filters
)
from .sorting import OrderBy, resolve_sort, normalize_direction
from .pagination import PageRequest, to_int, clamp
from .aggregates import build_window_select, build_totals_select
from .modules import ReportModule


GLOBAL_SEARCH_DEFAULT_LIMIT = 50
GLOBAL_SEARCH_MIN_LIMIT = 5
GLOBAL_SEARCH_MAX_LIMIT = 200


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


@dataclass(frozen=True)
class ReportQuery:
    """Parsed, validated report request (rebuilt per request)"""
    start: Optional[str] = None
    end: Optional[str] = None
    show_all: bool = False
    q: Optional[str] = None
    field_filters: Tuple[Tuple[str, str], ...] = ()
    sort: Optional[str] = None
    direction: str = "DESC"
    page: PageRequest = field(default_factory=lambda: PageRequest(1, 100))
    output_format: str = "json"
    today: date = field(default_factory=date.today)

    @property
    def is_csv(self) -> bool:
        return self.output_format == "csv"

    @property
    def filters(self) -> Dict[str, str]:
        return dict(self.field_filters)

    @classmethod
    def from_params(
        cls,
        module: ReportModule,
        params: Mapping[str, str],
        today: Optional[date] = None
    ) -> "ReportQuery":
        """
        Parse raw query-string values for a module.

        Malformed dates are dropped, unknown filter keys are ignored, page
        values are clamped; nothing here raises.
        """
        field_filters = []
        for param in module.filter_params:
            value = _clean(params.get(param))
            if value is not None:
                field_filters.append((param, value))

        output_format = "csv" if (params.get("format") or "").strip().lower() == "csv" else "json"

        return cls(
            start=parse_iso_date(params.get("start")),
            end=parse_iso_date(params.get("end")),
            show_all=params.get("all") == "1",
            q=_clean(params.get("q")),
            field_filters=tuple(field_filters),
            sort=_clean(params.get("sort")),
            direction=normalize_direction(params.get("dir")),
            page=PageRequest.from_params(
                params.get("page"),
                params.get("pageSize"),
                default_size=module.default_page_size,
                min_size=module.min_page_size,
                max_size=module.max_page_size,
                max_page=config.reports.max_page
            ),
            output_format=output_format,
            today=today or date.today()
        )


@dataclass(frozen=True)
class GlobalSearchQuery:
    """Parsed global search request"""
    q: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    show_all: bool = False
    limit: int = GLOBAL_SEARCH_DEFAULT_LIMIT
    today: date = field(default_factory=date.today)

    @classmethod
    def from_params(cls, params: Mapping[str, str], today: Optional[date] = None) -> "GlobalSearchQuery":
        raw_limit = params.get("limit", params.get("pageSize"))
        return cls(
            q=_clean(params.get("q")),
            start=parse_iso_date(params.get("start")),
            end=parse_iso_date(params.get("end")),
            show_all=params.get("all") == "1",
            limit=clamp(
                to_int(raw_limit, GLOBAL_SEARCH_DEFAULT_LIMIT),
                GLOBAL_SEARCH_MIN_LIMIT,
                GLOBAL_SEARCH_MAX_LIMIT
            ),
            today=today or date.today()
        )


def build_report_where_clause(module: ReportModule, query: ReportQuery) -> WhereClause:
    """
    Build the complete WHERE clause for a report request.

    Date range first, then the free-text search group, then per-field filters.
    """
    return WhereClause.combine(
        build_date_filter(
            module.date_column,
            query.start,
            query.end,
            query.show_all,
            today=query.today,
            window_days=config.reports.default_window_days
        ),
        build_search_clause(module.search_fields, query.q),
        build_field_filters(module.filter_fields, query.filters)
    )


@dataclass(frozen=True)
class ReportSQL:
    """The statements serving one report request"""
    module: ReportModule
    where: WhereClause
    order_by: OrderBy

    @classmethod
    def build(cls, module: ReportModule, query: ReportQuery) -> "ReportSQL":
        order_by = resolve_sort(
            module.sort_map,
            module.default_sort,
            query.sort,
            query.direction,
            tiebreaker=module.id_column
        )
        return cls(module, build_report_where_clause(module, query), order_by)

    @property
    def params(self) -> Tuple[Any, ...]:
        return self.where.params

    @property
    def base_select(self) -> str:
        """Rows with window totals, ordered, unpaged (used for CSV)"""
        columns = ",\n    ".join(self.module.select_columns)
        windows = build_window_select(self.module.window_totals)
        return (
            f"SELECT\n    {columns},\n    {windows}\n"
            f"FROM {self.module.from_sql}\n"
            f"{self.where.sql}\n"
            f"{self.order_by.sql}"
        )

    @property
    def count_sql(self) -> str:
        return f"SELECT COUNT(*) AS count FROM {self.module.from_sql} {self.where.sql}".rstrip()

    @property
    def totals_sql(self) -> str:
        totals = build_totals_select(self.module.grand_totals)
        return f"SELECT\n    {totals}\nFROM {self.module.from_sql}\n{self.where.sql}".rstrip()

    def paged(self, page: PageRequest) -> Tuple[str, Tuple[Any, ...]]:
        """Paged statement and its parameters (predicate params + limit, offset)"""
        return f"{self.base_select}\nLIMIT ? OFFSET ?", self.params + (page.limit, page.offset)
