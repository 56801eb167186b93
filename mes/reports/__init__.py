"""
Reports Module

Production reporting for the shop floor: one generic filter, sort,
aggregate, paginate and CSV engine driven by per-module configuration.
"""

from .router import router as reports_router
from .filters import FilterField, FilterMode, WhereClause, build_date_filter, build_search_clause
from .query import ReportQuery, GlobalSearchQuery, ReportSQL, build_report_where_clause
from .modules import ReportModule, REPORT_MODULES, get_module, get_module_by_section

__all__ = [
    "reports_router",
    "FilterField",
    "FilterMode",
    "WhereClause",
    "build_date_filter",
    "build_search_clause",
    "build_report_where_clause",
    "ReportQuery",
    "GlobalSearchQuery",
    "ReportSQL",
    "ReportModule",
    "REPORT_MODULES",
    "get_module",
    "get_module_by_section"
]
