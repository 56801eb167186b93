"""
================================================================================
Apparel MES Reports - Report Handlers Unit Tests
================================================================================
Description:
    Unit tests for the business logic layer, run against the seeded SQLite
    database from conftest. Verifies paging, window and grand totals, CSV
    output, the global search, dashboard metrics and entry lookup.

Test Coverage:
    - Paged reports: counts, totals, pages past the end, stable paging
    - Partition totals per module
    - CSV row count matches totalCount
    - Global search sections and limits
    - Dashboard metrics validation and values
    - Entry lookup ownership rules
    - Per-day entry lists: scoping, ordering and date validation
================================================================================
"""
import csv
import io
from datetime import date, timedelta

import pytest
from unittest.mock import Mock

from mes.auth import SessionUser
from mes.errors import ValidationError, NotFoundError
from mes.reports.service import ReportService
from mes.reports.query import ReportQuery, GlobalSearchQuery
from mes.reports.modules import (
    DAILY_PRODUCTION,
    QC_DAILY_PRODUCTION,
    EMBLEM_PRODUCTION,
    LASER_PRODUCTION
)
from mes.reports.handlers import (
    ProductionReports,
    GlobalSearchReports,
    DashboardReports,
    EntryReports
)


@pytest.fixture
def service(seeded_adapter):
    return ReportService(seeded_adapter)


@pytest.fixture
def reports(service):
    return ProductionReports(service)


def page_of(reports, module, **params):
    return reports.get_page(module, ReportQuery.from_params(module, params))


def row_by_id(result, row_id):
    return next(r for r in result["rows"] if r["id"] == row_id)


# ============================================================================
# Production reports
# ============================================================================

class TestProductionReports:
    """Test suite for the generic report engine"""

    def test_default_window_page(self, reports):
        result = page_of(reports, DAILY_PRODUCTION)

        assert result["page"] == 1
        assert result["pageSize"] == 100
        assert result["totalCount"] == 4
        assert result["totalPages"] == 1
        assert {r["id"] for r in result["rows"]} == {"e1", "e2", "e3", "e4"}

    def test_show_all(self, reports):
        assert page_of(reports, DAILY_PRODUCTION, all="1")["totalCount"] == 5

    def test_default_sort_newest_first(self, reports):
        result = page_of(reports, DAILY_PRODUCTION, sort="bogus_key")
        assert [r["id"] for r in result["rows"]] == ["e3", "e2", "e1", "e4"]

    def test_sort_ascending(self, reports):
        result = page_of(reports, DAILY_PRODUCTION, sort="pieces", dir="asc")
        assert [r["pieces"] for r in result["rows"]] == [4, 10, 12, 20]

    def test_grand_totals(self, reports):
        totals = page_of(reports, DAILY_PRODUCTION)["totals"]

        assert totals["total_stitches"] == 206000
        assert totals["total_pieces"] == 46
        assert totals["total_dozens"] == pytest.approx(3.83)

    def test_partition_totals(self, reports):
        row = row_by_id(page_of(reports, DAILY_PRODUCTION), "e1")

        assert row["shift_stitches"] == 158000
        assert row["shift_pieces"] == 34
        assert row["shift_stitches_by_person"] == 98000
        assert row["shift_pieces_by_person"] == 14

    def test_search_sales_order(self, reports):
        assert page_of(reports, DAILY_PRODUCTION, q="7001234")["totalCount"] == 1
        assert page_of(reports, DAILY_PRODUCTION, q="7001234", all="1")["totalCount"] == 2

    def test_numeric_search_is_substring(self, reports):
        # 7001234 and 7001299 both contain "70012"
        result = page_of(reports, DAILY_PRODUCTION, q="70012")
        assert {r["id"] for r in result["rows"]} == {"e1", "e3"}

    def test_non_ascii_text_is_case_insensitive(self, reports, seeded_adapter):
        today = date.today()
        seeded_adapter.execute(
            "INSERT INTO embroidery_daily_entries (id, entry_ts, shift_date, name, employee_number, "
            "pieces, notes) VALUES (?, ?, ?, ?, ?, ?, ?)",
            ("e6", f"{today.isoformat()} 11:00:00", today, "ÉMILE Zoë", 1004, 3, "Größe XL")
        )

        assert page_of(reports, DAILY_PRODUCTION, q="émile")["totalCount"] == 1
        assert page_of(reports, DAILY_PRODUCTION, q="ÉMILE ZOË")["totalCount"] == 1
        assert page_of(reports, DAILY_PRODUCTION, name="zoË")["totalCount"] == 1
        assert page_of(reports, DAILY_PRODUCTION, notes="GRÖ")["totalCount"] == 1

    def test_boolean_filter(self, reports):
        assert page_of(reports, DAILY_PRODUCTION, is_3d="TRUE")["totalCount"] == 2
        assert page_of(reports, DAILY_PRODUCTION, is_3d="banana")["totalCount"] == 4

    def test_filtered_rows_are_a_subset(self, reports):
        unfiltered = {r["id"] for r in page_of(reports, DAILY_PRODUCTION)["rows"]}
        filtered = {r["id"] for r in page_of(reports, DAILY_PRODUCTION, name="alice")["rows"]}

        assert filtered == {"e1", "e2"}
        assert filtered <= unfiltered

    def test_page_past_the_end(self, reports):
        result = page_of(reports, DAILY_PRODUCTION, page="5")

        assert result["rows"] == []
        assert result["totalCount"] == 4
        assert result["page"] == 5

    def test_no_matches(self, reports):
        result = page_of(reports, DAILY_PRODUCTION, q="no-such-thing")

        assert result["totalCount"] == 0
        assert result["totalPages"] == 0
        assert result["totals"]["total_pieces"] == 0

    def test_idempotent(self, reports):
        first = page_of(reports, QC_DAILY_PRODUCTION, q="dana")
        second = page_of(reports, QC_DAILY_PRODUCTION, q="dana")
        assert first == second

    def test_pages_partition_the_result(self, reports, seeded_adapter):
        today = date.today()
        seeded_adapter.execute_many(
            "INSERT INTO laser_entries (id, entry_ts, entry_date, name, employee_number, "
            "sales_order, leather_style_color, pieces_cut, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [(f"bulk{i:02d}", f"{today.isoformat()} 08:00:00", today, "Bulk Cutter", 4999,
              7100000 + i, "Black", 1, None) for i in range(22)]
        )

        first = page_of(reports, LASER_PRODUCTION, pageSize="10", page="1")
        total = first["totalCount"]
        assert total == 25
        assert first["totalPages"] == 3

        seen = []
        for page in range(1, first["totalPages"] + 1):
            seen.extend(r["id"] for r in page_of(reports, LASER_PRODUCTION, pageSize="10", page=str(page))["rows"])

        assert len(seen) == total
        assert len(set(seen)) == total

    def test_qc_partition_totals(self, reports):
        row = row_by_id(page_of(reports, QC_DAILY_PRODUCTION), "q1")

        assert row["total_qty_inspected_by_date"] == 160
        assert row["flat_totals"] == 120
        assert row["three_d_totals"] == 40
        assert row["flat_totals_by_person"] == 90
        assert row["three_d_totals_by_person"] == 40
        assert row["total_qty_inspected_by_person"] == 130

    def test_qc_grand_totals(self, reports):
        assert page_of(reports, QC_DAILY_PRODUCTION)["totals"] == {
            "total_inspected_quantity": 180,
            "total_rejected_quantity": 3,
            "total_quantity_shipped": 177,
        }

    def test_emblem_partition_totals(self, reports):
        result = page_of(reports, EMBLEM_PRODUCTION)
        row = row_by_id(result, "l1")

        assert result["totalCount"] == 4
        assert row["submission_id"] == "s1"
        assert row["notes"] == "line one"
        assert row["total_pieces"] == 44
        assert row["sew"] == 24
        assert row["sticker"] == 10
        assert row["heat_seal"] == 10
        assert row["total_pieces_by_person"] == 40
        assert row["total_heat_seal_by_person"] == 6
        assert result["totals"] == {"total_pieces": 44}

    def test_laser_search_and_totals(self, reports):
        result = page_of(reports, LASER_PRODUCTION, q="brown")

        assert {r["id"] for r in result["rows"]} == {"z1", "z3"}
        assert result["totals"] == {"total_pieces_cut": 50}
        assert row_by_id(result, "z1")["total_pieces_per_day"] == 30


class TestCsvExport:
    """Test suite for the CSV path"""

    def test_row_count_matches_total_count(self, reports):
        params = {"all": "1"}
        body = reports.export_csv(DAILY_PRODUCTION, ReportQuery.from_params(DAILY_PRODUCTION, params))
        total = page_of(reports, DAILY_PRODUCTION, **params)["totalCount"]

        parsed = list(csv.reader(io.StringIO(body, newline="")))
        assert parsed[0] == list(DAILY_PRODUCTION.csv_columns)
        assert len(parsed) - 1 == total

    def test_csv_ignores_paging(self, reports):
        query = ReportQuery.from_params(DAILY_PRODUCTION, {"all": "1", "pageSize": "10", "page": "3"})
        parsed = list(csv.reader(io.StringIO(reports.export_csv(DAILY_PRODUCTION, query), newline="")))
        assert len(parsed) == 6

    def test_csv_values(self, reports):
        query = ReportQuery.from_params(DAILY_PRODUCTION, {"sort": "entry_ts", "dir": "asc"})
        body = reports.export_csv(DAILY_PRODUCTION, query)
        rows = list(csv.DictReader(io.StringIO(body, newline="")))

        e2 = next(r for r in rows if r["sales_order"] == "7005555")
        assert e2["notes"] == 'Hello, "World"'
        assert e2["is_3d"] == "false"
        assert e2["shift_date"] == date.today().isoformat()
        assert '"Hello, ""World"""' in body

        e4 = next(r for r in rows if r["sales_order"] == "8123456")
        assert e4["notes"] == "multi\nline"
        assert e4["is_3d"] == "true"


# ============================================================================
# Global search
# ============================================================================

class TestGlobalSearch:
    """Test suite for the cross-module search"""

    def test_empty_query_does_not_touch_database(self):
        adapter = Mock()
        adapter.fetchall.side_effect = AssertionError("database should not be queried")
        handler = GlobalSearchReports(ReportService(adapter))

        result = handler.search(GlobalSearchQuery.from_params({"q": "   "}))

        assert result["q"] == ""
        assert [s["key"] for s in result["sections"]] == ["daily", "qc", "emblem", "laser"]
        assert all(s["count"] == 0 and s["rows"] == [] for s in result["sections"])

    def test_sales_order_across_modules(self, service):
        result = GlobalSearchReports(service).search(GlobalSearchQuery.from_params({"q": "7001234"}))
        counts = {s["key"]: s["count"] for s in result["sections"]}

        assert counts == {"daily": 1, "qc": 1, "emblem": 1, "laser": 1}
        assert result["limit"] == 50

    def test_show_all_widens_the_window(self, service):
        result = GlobalSearchReports(service).search(GlobalSearchQuery.from_params({"q": "7001234", "all": "1"}))
        counts = {s["key"]: s["count"] for s in result["sections"]}

        assert counts == {"daily": 2, "qc": 1, "emblem": 2, "laser": 1}

    def test_section_rows(self, service):
        result = GlobalSearchReports(service).search(GlobalSearchQuery.from_params({"q": "eagle"}))
        emblem = next(s for s in result["sections"] if s["key"] == "emblem")

        assert emblem["title"] == "Emblem Production"
        assert emblem["rows"][0]["submission_id"] == "s1"
        assert emblem["rows"][0]["logo_name"] == "Eagle"

    def test_daily_rows_expose_entry_date(self, service):
        result = GlobalSearchReports(service).search(GlobalSearchQuery.from_params({"q": "alice"}))
        daily = result["sections"][0]

        assert daily["count"] == 2
        assert str(daily["rows"][0]["entry_date"]) == date.today().isoformat()
        assert daily["rows"][0]["id"] == "e2"

    def test_limit_caps_each_section(self, service, seeded_adapter):
        today = date.today()
        seeded_adapter.execute_many(
            "INSERT INTO laser_entries (id, entry_ts, entry_date, name, employee_number, "
            "sales_order, leather_style_color, pieces_cut, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [(f"many{i:02d}", f"{today.isoformat()} 08:00:00", today, "Many Cuts", 4998,
              7200000 + i, "Red", 1, None) for i in range(8)]
        )
        result = GlobalSearchReports(service).search(GlobalSearchQuery.from_params({"q": "many cuts", "limit": "1"}))
        laser = result["sections"][3]

        assert result["limit"] == 5
        assert laser["count"] == 5


# ============================================================================
# Dashboard metrics
# ============================================================================

class TestDashboardMetrics:
    """Test suite for per-day totals"""

    def test_missing_date(self, service):
        with pytest.raises(ValidationError) as exc_info:
            DashboardReports(service).get_metrics(None)
        assert exc_info.value.message == "Missing date parameter"

    @pytest.mark.parametrize("value", ["06/15/2025", "2025-6-15", "2025-13-45", "today"])
    def test_invalid_date(self, service, value):
        with pytest.raises(ValidationError) as exc_info:
            DashboardReports(service).get_metrics(value)
        assert exc_info.value.message == "Invalid date format. Use YYYY-MM-DD"

    def test_today(self, service):
        today = date.today().isoformat()
        metrics = DashboardReports(service).get_metrics(today)

        assert metrics == {
            "date": today,
            "totalStitches": 158000,
            "totalPieces": 34,
            "qcFlatInspected": 120,
            "qc3DInspected": 40,
            "qcTotalInspected": 160,
            "emblemSewPieces": 24,
            "emblemStickerPieces": 10,
            "emblemHeatSealPieces": 10,
            "emblemTotalPieces": 44,
            "laserTotalPieces": 45,
        }

    def test_day_without_entries(self, service):
        day = (date.today() - timedelta(days=400)).isoformat()
        metrics = DashboardReports(service).get_metrics(day)

        assert metrics["date"] == day
        assert all(v == 0 for k, v in metrics.items() if k != "date")


# ============================================================================
# Entry lookup
# ============================================================================

class TestEntryLookup:
    """Test suite for single-entry reads"""

    ADMIN = SessionUser("admin", "Admin", 9000, "ADMIN")
    ALICE = SessionUser("alice", "Alice Smith", 1001, "OPERATOR")
    SUPERVISOR = SessionUser("sup", "Sup", 5555, "SUPERVISOR")

    def test_admin_reads_any_entry(self, service):
        result = EntryReports(service).get_entry("daily", "e3", self.ADMIN)

        assert result["module"] == "daily"
        assert result["entry"]["name"] == "Bob Jones"
        assert "lines" not in result

    def test_owner_reads_own_entry(self, service):
        assert EntryReports(service).get_entry("daily", "e1", self.ALICE)["entry"]["id"] == "e1"

    def test_other_employees_entry_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            EntryReports(service).get_entry("daily", "e3", self.ALICE)

    def test_non_admin_roles_are_restricted(self, service):
        with pytest.raises(NotFoundError):
            EntryReports(service).get_entry("qc", "q1", self.SUPERVISOR)

    def test_emblem_submission_with_lines(self, service):
        result = EntryReports(service).get_entry("emblem", "s1", self.ADMIN)

        assert result["entry"]["name"] == "Faye Kim"
        assert [line["id"] for line in result["lines"]] == ["l1", "l2", "l3"]

    def test_unknown_module(self, service):
        with pytest.raises(NotFoundError):
            EntryReports(service).get_entry("welding", "x", self.ADMIN)

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            EntryReports(service).get_entry("laser", "nope", self.ADMIN)


class TestEntryLists:
    """Test suite for per-day entry lists"""

    ADMIN = SessionUser("admin", "Admin", 9000, "ADMIN")
    ALICE = SessionUser("alice", "Alice Smith", 1001, "OPERATOR")
    GUS = SessionUser("gus", "Gus Diaz", 3002, "OPERATOR")
    SUPERVISOR = SessionUser("sup", "Sup", 5555, "SUPERVISOR")

    def entry_ids(self, service, section, day, user):
        result = EntryReports(service).list_entries(section, day, user)
        return [e["id"] for e in result["entries"]]

    def test_admin_sees_the_whole_day(self, service):
        today = date.today().isoformat()
        assert self.entry_ids(service, "daily", today, self.ADMIN) == ["e3", "e2", "e1"]

    def test_owner_sees_own_entries(self, service):
        today = date.today().isoformat()
        assert self.entry_ids(service, "daily", today, self.ALICE) == ["e2", "e1"]

    def test_uses_the_module_date_column(self, service):
        yesterday = (date.today() - timedelta(days=1)).isoformat()

        assert self.entry_ids(service, "daily", yesterday, self.ADMIN) == ["e4"]
        assert self.entry_ids(service, "daily", yesterday, self.ALICE) == []

    def test_non_admin_roles_are_scoped(self, service):
        today = date.today().isoformat()
        assert self.entry_ids(service, "qc", today, self.SUPERVISOR) == []

    def test_missing_employee_number(self, service):
        nobody = SessionUser("ghost", "Ghost", None, "OPERATOR")
        assert EntryReports(service).list_entries("laser", date.today().isoformat(), nobody) == {"entries": []}

    def test_emblem_submissions_carry_lines(self, service):
        result = EntryReports(service).list_entries("emblem", date.today().isoformat(), self.ADMIN)
        entries = result["entries"]

        assert [e["id"] for e in entries] == ["s2", "s1"]
        assert [line["id"] for line in entries[0]["lines"]] == ["l4"]
        assert [line["id"] for line in entries[1]["lines"]] == ["l1", "l2", "l3"]

    def test_emblem_owner_scoping(self, service):
        result = EntryReports(service).list_entries("emblem", date.today().isoformat(), self.GUS)

        assert [e["id"] for e in result["entries"]] == ["s2"]
        assert [line["pieces"] for line in result["entries"][0]["lines"]] == [4]

    def test_missing_date(self, service):
        with pytest.raises(ValidationError) as exc_info:
            EntryReports(service).list_entries("laser", None, self.ADMIN)
        assert exc_info.value.message == "Missing date parameter"

    @pytest.mark.parametrize("value", ["2025-06-15junk", "2025/06/15", "2025-02-30"])
    def test_invalid_date(self, service, value):
        with pytest.raises(ValidationError) as exc_info:
            EntryReports(service).list_entries("laser", value, self.ADMIN)
        assert exc_info.value.message == "Invalid date format. Use YYYY-MM-DD"

    def test_unknown_module(self, service):
        with pytest.raises(NotFoundError):
            EntryReports(service).list_entries("welding", date.today().isoformat(), self.ADMIN)
