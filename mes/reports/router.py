"""
Report Router (API Layer)

FastAPI router defining the report API endpoints: the four "all entries"
production reports (JSON pages or CSV), the global search, the dashboard
metrics, the per-day entry lists and the single-entry lookup. Report routes
are plain `def` endpoints so their blocking database work runs in the server
thread pool.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from ..auth import SessionUser, require_auth, require_roles
from .handlers import (
    ProductionReports,
    GlobalSearchReports,
    DashboardReports,
    EntryReports
)
from .service import ReportService
from .query import ReportQuery, GlobalSearchQuery
from .csv_export import csv_headers
from .models import ReportPage, GlobalSearchResponse, DashboardMetrics, EntryDetail, EntryList
from .modules import (
    ReportModule,
    DAILY_PRODUCTION,
    QC_DAILY_PRODUCTION,
    EMBLEM_PRODUCTION,
    LASER_PRODUCTION
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["reports"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


# Dependency to get report service
def get_report_service(request: Request) -> ReportService:
    """Report service bound to the adapter created at application startup"""
    return ReportService(request.app.state.db_adapter)


def _run_report(module: ReportModule, request: Request, service: ReportService):
    """Serve one report request as a JSON page or a CSV download"""
    query = ReportQuery.from_params(module, request.query_params)
    handler = ProductionReports(service)

    if query.is_csv:
        return Response(
            content=handler.export_csv(module, query),
            media_type=CSV_MEDIA_TYPE,
            headers=csv_headers(module.key)
        )
    return handler.get_page(module, query)


# ============================================================================
# PRODUCTION REPORT ENDPOINTS
# ============================================================================

@router.get("/admin/daily-production-all", response_model=ReportPage)
def get_daily_production_all(
    request: Request,
    user: SessionUser = Depends(require_roles()),
    service: ReportService = Depends(get_report_service)
):
    """All embroidery daily entries with per-shift totals"""
    return _run_report(DAILY_PRODUCTION, request, service)


@router.get("/admin/qc-daily-production-all", response_model=ReportPage)
def get_qc_daily_production_all(
    request: Request,
    user: SessionUser = Depends(require_roles()),
    service: ReportService = Depends(get_report_service)
):
    """All QC inspection entries with flat/3D totals"""
    return _run_report(QC_DAILY_PRODUCTION, request, service)


@router.get("/admin/emblem-production-all", response_model=ReportPage)
def get_emblem_production_all(
    request: Request,
    user: SessionUser = Depends(require_roles()),
    service: ReportService = Depends(get_report_service)
):
    """All emblem submission lines with per-type totals"""
    return _run_report(EMBLEM_PRODUCTION, request, service)


@router.get("/admin/laser-production-all", response_model=ReportPage)
def get_laser_production_all(
    request: Request,
    user: SessionUser = Depends(require_roles()),
    service: ReportService = Depends(get_report_service)
):
    """All laser cutting entries with pieces per day"""
    return _run_report(LASER_PRODUCTION, request, service)


# ============================================================================
# SEARCH & DASHBOARD ENDPOINTS
# ============================================================================

@router.get("/admin/global-search", response_model=GlobalSearchResponse)
def global_search(
    request: Request,
    user: SessionUser = Depends(require_roles()),
    service: ReportService = Depends(get_report_service)
):
    """Search every production module at once"""
    query = GlobalSearchQuery.from_params(request.query_params)
    return GlobalSearchReports(service).search(query)


@router.get("/dashboard-metrics", response_model=DashboardMetrics)
def get_dashboard_metrics(
    date: Optional[str] = Query(None),
    user: SessionUser = Depends(require_auth),
    service: ReportService = Depends(get_report_service)
):
    """Totals across modules for a single day"""
    return DashboardReports(service).get_metrics(date)


@router.get("/entries/{module}", response_model=EntryList)
def list_entries(
    module: str,
    date: Optional[str] = Query(None),
    user: SessionUser = Depends(require_auth),
    service: ReportService = Depends(get_report_service)
):
    """One day of entries for a module; non-admins only see their own"""
    return EntryReports(service).list_entries(module, date, user)


@router.get("/entries/{module}/{entry_id}", response_model=EntryDetail)
def get_entry(
    module: str,
    entry_id: str,
    user: SessionUser = Depends(require_auth),
    service: ReportService = Depends(get_report_service)
):
    """One production entry; non-admins only see their own"""
    return EntryReports(service).get_entry(module, entry_id, user)
