"""
Report Handlers (Business Logic Layer)

Report endpoint handlers implementing the business logic for production
reporting. One generic engine serves every module from its configuration;
the remaining handlers cover the global search, the dashboard metrics and the
single-entry lookup with the per-day entry lists.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from ..config import config
from ..auth import SessionUser
from ..errors import ValidationError, NotFoundError
from .service import ReportService
from .filters import WhereClause, YMD_PATTERN, build_date_filter, build_search_clause
from .pagination import total_pages
from .aggregates import empty_totals
from .csv_export import render_csv
from .modules import ReportModule, EntrySource, REPORT_MODULES, get_module_by_section
from .query import ReportQuery, GlobalSearchQuery, ReportSQL

logger = logging.getLogger(__name__)


def parse_required_date(value: Optional[str]) -> str:
    """
    Validate a required YYYY-MM-DD day parameter.

    Raises:
        ValidationError: when the value is missing or not a calendar date
    """
    value = (value or "").strip()
    if not value:
        raise ValidationError("Missing date parameter")
    if not YMD_PATTERN.match(value):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    return value


class ProductionReports:
    """Paged JSON and CSV output for the production modules"""

    def __init__(self, service: ReportService):
        self.service = service

    def get_page(self, module: ReportModule, query: ReportQuery) -> Dict[str, Any]:
        """
        Get one page of a report.

        Count, paged rows and grand totals are independent reads over the
        same predicate and run concurrently.
        """
        statements = ReportSQL.build(module, query)
        page = query.page
        paged_sql, paged_params = statements.paged(page)

        logger.debug(
            f"{module.key}: page={page.page} size={page.page_size} "
            f"order='{statements.order_by.sql}' where='{statements.where.predicate}'"
        )

        results = self.service.run_concurrently({
            'count': lambda: self.service.execute_scalar(statements.count_sql, statements.params),
            'rows': lambda: self.service.execute_query(paged_sql, paged_params),
            'totals': lambda: self.service.execute_single(statements.totals_sql, statements.params),
        })

        total_count = int(results['count'] or 0)
        return {
            "page": page.page,
            "pageSize": page.page_size,
            "totalCount": total_count,
            "totalPages": total_pages(total_count, page.page_size),
            "rows": results['rows'],
            "totals": results['totals'] or empty_totals(module.grand_totals),
        }

    def export_csv(self, module: ReportModule, query: ReportQuery) -> str:
        """Get the full filtered report as CSV text (no paging)"""
        statements = ReportSQL.build(module, query)
        rows = self.service.execute_query(statements.base_select, statements.params)
        logger.info(f"{module.key}: CSV export of {len(rows)} rows")
        return render_csv(rows, module.csv_columns)


class GlobalSearchReports:
    """Free-text search across every production module"""

    def __init__(self, service: ReportService):
        self.service = service

    def search(self, query: GlobalSearchQuery) -> Dict[str, Any]:
        """Search each module's section, newest first, capped at query.limit"""
        if not query.q:
            rows_by_section = {m.search_section.key: [] for m in REPORT_MODULES}
        else:
            rows_by_section = self.service.run_concurrently({
                m.search_section.key: (lambda m=m: self._search_module(m, query))
                for m in REPORT_MODULES
            })

        sections = []
        for module in REPORT_MODULES:
            section = module.search_section
            rows = rows_by_section[section.key]
            sections.append({
                "key": section.key,
                "title": section.title,
                "count": len(rows),
                "rows": rows,
            })

        return {
            "q": query.q or "",
            "start": query.start,
            "end": query.end,
            "all": query.show_all,
            "limit": query.limit,
            "sections": sections,
        }

    def _search_module(self, module: ReportModule, query: GlobalSearchQuery) -> List[Dict[str, Any]]:
        section = module.search_section
        where = WhereClause.combine(
            build_search_clause(section.search_fields, query.q),
            build_date_filter(
                module.date_column,
                query.start,
                query.end,
                query.show_all,
                today=query.today,
                window_days=config.reports.default_window_days
            )
        )
        columns = ",\n    ".join(section.select_columns)
        sql = (
            f"SELECT\n    {columns}\n"
            f"FROM {module.from_sql}\n"
            f"{where.sql}\n"
            f"ORDER BY {module.timestamp_column} DESC, {module.id_column} DESC\n"
            f"LIMIT ?"
        )
        return self.service.execute_query(sql, where.params + (query.limit,))


class DashboardReports:
    """Per-day totals across modules for the dashboard"""

    def __init__(self, service: ReportService):
        self.service = service

    def get_metrics(self, date_value: Optional[str]) -> Dict[str, Any]:
        """Get every dashboard metric for a single YYYY-MM-DD day"""
        date_value = parse_required_date(date_value)

        totals_by_module = self.service.run_concurrently({
            m.key: (lambda m=m: self._module_totals(m, date_value))
            for m in REPORT_MODULES
        })

        metrics: Dict[str, Any] = {"date": date_value}
        for module in REPORT_MODULES:
            row = totals_by_module[module.key] or {}
            for metric in module.dashboard_metrics:
                metrics[metric.key] = row.get(metric.total.alias) or 0
        return metrics

    def _module_totals(self, module: ReportModule, date_value: str) -> Optional[Dict[str, Any]]:
        totals = ",\n    ".join(m.total.sql() for m in module.dashboard_metrics)
        sql = f"SELECT\n    {totals}\nFROM {module.from_sql}\nWHERE {module.date_column} = ?"
        return self.service.execute_single(sql, (date_value,))


class EntryReports:
    """Single-entry lookup and per-day entry lists, scoped to the caller"""

    def __init__(self, service: ReportService):
        self.service = service

    @staticmethod
    def _get_module(section_key: str) -> ReportModule:
        module = get_module_by_section(section_key)
        if module is None:
            raise NotFoundError(f"Unknown module: {section_key}")
        return module

    @staticmethod
    def _owner_clause(source: EntrySource, user: SessionUser, alias: str = "") -> Optional[WhereClause]:
        """
        Ownership predicate for the caller.

        Returns an empty clause for admins, and None when a non-admin carries
        no employee number and therefore owns nothing.
        """
        if user.is_admin():
            return WhereClause()
        if user.employee_number is None:
            return None
        return WhereClause((f"{alias}{source.owner_column} = ?",), (user.employee_number,))

    def list_entries(self, section_key: str, date_value: Optional[str], user: SessionUser) -> Dict[str, Any]:
        """
        List one day's entries for a module, newest first.

        Admins see every entry for the day, everyone else only their own.
        Emblem submissions carry their lines under "lines".
        """
        module = self._get_module(section_key)
        day = parse_required_date(date_value)
        source = module.entry_source

        owner = self._owner_clause(source, user, alias="s.")
        if owner is None:
            return {"entries": []}
        where = WhereClause.combine(WhereClause((f"s.{source.date_column} = ?",), (day,)), owner)

        entries = self.service.execute_query(
            f"SELECT s.* FROM {source.table} s {where.sql} "
            f"ORDER BY s.{source.timestamp_column} DESC, s.{source.id_column} DESC",
            where.params
        )

        if source.lines_table:
            lines = self.service.execute_query(
                f"SELECT l.* FROM {source.lines_table} l "
                f"JOIN {source.table} s ON s.{source.id_column} = l.{source.lines_foreign_key} "
                f"{where.sql} ORDER BY l.id",
                where.params
            )
            lines_by_entry: Dict[Any, List[Dict[str, Any]]] = {}
            for line in lines:
                lines_by_entry.setdefault(line[source.lines_foreign_key], []).append(line)
            for entry in entries:
                entry["lines"] = lines_by_entry.get(entry[source.id_column], [])

        logger.debug(f"{module.key}: {len(entries)} entries on {day} for {user.username}")
        return {"entries": entries}

    def get_entry(self, section_key: str, entry_id: str, user: SessionUser) -> Dict[str, Any]:
        """
        Get one entry by id.

        Callers without an admin role only see their own entries; anything
        else is reported as not found so ids of other employees' entries are
        not disclosed.
        """
        module = self._get_module(section_key)
        source = module.entry_source

        owner = self._owner_clause(source, user)
        if owner is None:
            raise NotFoundError("Entry not found")
        where = WhereClause.combine(WhereClause((f"{source.id_column} = ?",), (entry_id,)), owner)

        entry = self.service.execute_single(f"SELECT * FROM {source.table} {where.sql}", where.params)
        if entry is None:
            raise NotFoundError("Entry not found")

        result: Dict[str, Any] = {"module": section_key, "entry": entry}
        if source.lines_table:
            result["lines"] = self.service.execute_query(
                f"SELECT * FROM {source.lines_table} WHERE {source.lines_foreign_key} = ? ORDER BY id",
                (entry_id,)
            )
        return result
