"""
Report Modules

Configuration objects describing each production report: its tables, the
allow-listed filter, search and sort columns, the window and grand totals,
the CSV column order, page-size limits, and how its entries appear in the
global search, the dashboard metrics and the single-entry lookup. The generic
engine in handlers.py is driven entirely by these definitions, and they are
the only source of column names that ever reach generated SQL.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .filters import FilterField, FilterMode
from .aggregates import WindowTotal, GrandTotal

CONTAINS = FilterMode.CONTAINS
CONTAINS_TEXT = FilterMode.CONTAINS_TEXT
BOOLEAN = FilterMode.BOOLEAN

HEAT_SEAL_VALUES = ("heat seal", "heatseal", "heat_seal")


@dataclass(frozen=True)
class SearchSection:
    """How a module contributes a section to the global search"""
    key: str
    title: str
    select_columns: Tuple[str, ...]
    search_fields: Tuple[FilterField, ...]


@dataclass(frozen=True)
class DashboardMetric:
    """A per-day total reported on the dashboard under a camelCase key"""
    key: str
    total: GrandTotal


@dataclass(frozen=True)
class EntrySource:
    """Tables backing the single-entry lookup and the per-day entry list"""
    table: str
    id_column: str = "id"
    owner_column: str = "employee_number"
    date_column: str = "entry_date"
    timestamp_column: str = "entry_ts"
    lines_table: Optional[str] = None
    lines_foreign_key: Optional[str] = None


@dataclass(frozen=True)
class ReportModule:
    """Complete configuration of one production report"""
    key: str
    title: str
    from_sql: str
    date_column: str
    timestamp_column: str
    id_column: str
    select_columns: Tuple[str, ...]
    filter_fields: Tuple[FilterField, ...]
    search_fields: Tuple[FilterField, ...]
    sort_map: Mapping[str, str]
    default_sort: str
    window_totals: Tuple[WindowTotal, ...]
    grand_totals: Tuple[GrandTotal, ...]
    csv_columns: Tuple[str, ...]
    default_page_size: int
    search_section: SearchSection
    dashboard_metrics: Tuple[DashboardMetric, ...]
    entry_source: EntrySource
    min_page_size: int = 10
    max_page_size: int = 500

    @property
    def filter_params(self) -> Tuple[str, ...]:
        return tuple(f.param for f in self.filter_fields)


# ============================================================================
# DAILY (EMBROIDERY) PRODUCTION
# ============================================================================

DAILY_PRODUCTION = ReportModule(
    key="daily-production",
    title="Daily Production",
    from_sql="embroidery_daily_entries e",
    date_column="e.shift_date",
    timestamp_column="e.entry_ts",
    id_column="e.id",
    select_columns=(
        "e.id", "e.shift_date", "e.entry_ts", "e.name", "e.employee_number",
        "e.shift", "e.machine_number", "e.sales_order", "e.detail_number",
        "e.embroidery_location", "e.stitches", "e.pieces", "e.is_3d",
        "e.is_knit", "e.detail_complete", "e.notes", "e.total_stitches",
        "e.dozens",
    ),
    filter_fields=(
        FilterField("shift", "e.shift", CONTAINS),
        FilterField("employee_number", "e.employee_number", CONTAINS_TEXT),
        FilterField("name", "e.name", CONTAINS),
        FilterField("sales_order", "e.sales_order", CONTAINS_TEXT),
        FilterField("machine_number", "e.machine_number", CONTAINS_TEXT),
        FilterField("location", "e.embroidery_location", CONTAINS),
        FilterField("detail_number", "e.detail_number", CONTAINS_TEXT),
        FilterField("is_3d", "e.is_3d", BOOLEAN),
        FilterField("is_knit", "e.is_knit", BOOLEAN),
        FilterField("detail_complete", "e.detail_complete", BOOLEAN),
        FilterField("notes", "e.notes", CONTAINS),
    ),
    search_fields=(
        FilterField("name", "e.name"),
        FilterField("shift", "e.shift"),
        FilterField("location", "e.embroidery_location"),
        FilterField("notes", "e.notes"),
        FilterField("employee_number", "e.employee_number", CONTAINS_TEXT),
        FilterField("machine_number", "e.machine_number", CONTAINS_TEXT),
        FilterField("sales_order", "e.sales_order", CONTAINS_TEXT),
        FilterField("detail_number", "e.detail_number", CONTAINS_TEXT),
    ),
    sort_map={
        "shift_date": "e.shift_date",
        "entry_ts": "e.entry_ts",
        "name": "e.name",
        "employee_number": "e.employee_number",
        "machine_number": "e.machine_number",
        "sales_order": "e.sales_order",
        "detail_number": "e.detail_number",
        "embroidery_location": "e.embroidery_location",
        "stitches": "e.stitches",
        "pieces": "e.pieces",
        "total_stitches": "e.total_stitches",
        "dozens": "e.dozens",
        # window aliases
        "shift_stitches": "shift_stitches",
        "shift_pieces": "shift_pieces",
        "shift_stitches_by_person": "shift_stitches_by_person",
        "shift_pieces_by_person": "shift_pieces_by_person",
    },
    default_sort="entry_ts",
    window_totals=(
        WindowTotal("shift_stitches", "e.total_stitches", ("e.shift_date",)),
        WindowTotal("shift_pieces", "e.pieces", ("e.shift_date",)),
        WindowTotal("shift_stitches_by_person", "e.total_stitches", ("e.shift_date", "e.name")),
        WindowTotal("shift_pieces_by_person", "e.pieces", ("e.shift_date", "e.name")),
    ),
    grand_totals=(
        GrandTotal("total_stitches", "e.total_stitches"),
        GrandTotal("total_pieces", "e.pieces"),
        GrandTotal("total_dozens", "e.dozens"),
    ),
    csv_columns=(
        "shift_date", "entry_ts", "name", "machine_number", "sales_order",
        "detail_number", "embroidery_location", "stitches", "pieces", "is_3d",
        "is_knit", "detail_complete", "notes", "total_stitches",
        "shift_stitches", "shift_pieces", "shift_stitches_by_person",
        "shift_pieces_by_person", "dozens", "employee_number", "shift",
    ),
    default_page_size=100,
    search_section=SearchSection(
        key="daily",
        title="Daily Production",
        select_columns=(
            "e.id", "e.entry_ts", "e.shift_date AS entry_date", "e.name",
            "e.employee_number", "e.shift", "e.machine_number", "e.sales_order",
            "e.detail_number", "e.embroidery_location", "e.pieces", "e.notes",
        ),
        search_fields=(
            FilterField("name", "e.name"),
            FilterField("shift", "e.shift"),
            FilterField("location", "e.embroidery_location"),
            FilterField("notes", "e.notes"),
            FilterField("employee_number", "e.employee_number", CONTAINS_TEXT),
            FilterField("machine_number", "e.machine_number", CONTAINS_TEXT),
            FilterField("sales_order", "e.sales_order", CONTAINS_TEXT),
            FilterField("detail_number", "e.detail_number", CONTAINS_TEXT),
            FilterField("shift_date", "e.shift_date", CONTAINS_TEXT),
        ),
    ),
    dashboard_metrics=(
        DashboardMetric("totalStitches", GrandTotal("total_stitches", "e.total_stitches")),
        DashboardMetric("totalPieces", GrandTotal("total_pieces", "e.pieces")),
    ),
    entry_source=EntrySource(table="embroidery_daily_entries", date_column="shift_date"),
)


# ============================================================================
# QC DAILY PRODUCTION
# ============================================================================

QC_DAILY_PRODUCTION = ReportModule(
    key="qc-daily-production",
    title="QC Daily Production",
    from_sql="qc_daily_entries q",
    date_column="q.entry_date",
    timestamp_column="q.entry_ts",
    id_column="q.id",
    select_columns=(
        "q.id", "q.entry_ts", "q.entry_date", "q.name", "q.employee_number",
        "q.sales_order", "q.detail_number", "q.flat_or_3d", "q.order_quantity",
        "q.inspected_quantity", "q.rejected_quantity", "q.quantity_shipped",
        "q.notes",
    ),
    filter_fields=(
        FilterField("name", "q.name", CONTAINS),
        FilterField("employee_number", "q.employee_number", CONTAINS_TEXT),
        FilterField("sales_order", "q.sales_order", CONTAINS_TEXT),
        FilterField("detail_number", "q.detail_number", CONTAINS_TEXT),
        FilterField("flat_or_3d", "q.flat_or_3d", CONTAINS),
        FilterField("order_quantity", "q.order_quantity", CONTAINS_TEXT),
        FilterField("inspected_quantity", "q.inspected_quantity", CONTAINS_TEXT),
        FilterField("rejected_quantity", "q.rejected_quantity", CONTAINS_TEXT),
        FilterField("quantity_shipped", "q.quantity_shipped", CONTAINS_TEXT),
        FilterField("notes", "q.notes", CONTAINS),
    ),
    search_fields=(
        FilterField("name", "q.name"),
        FilterField("flat_or_3d", "q.flat_or_3d"),
        FilterField("notes", "q.notes"),
        FilterField("employee_number", "q.employee_number", CONTAINS_TEXT),
        FilterField("sales_order", "q.sales_order", CONTAINS_TEXT),
        FilterField("detail_number", "q.detail_number", CONTAINS_TEXT),
        FilterField("order_quantity", "q.order_quantity", CONTAINS_TEXT),
        FilterField("inspected_quantity", "q.inspected_quantity", CONTAINS_TEXT),
        FilterField("rejected_quantity", "q.rejected_quantity", CONTAINS_TEXT),
        FilterField("quantity_shipped", "q.quantity_shipped", CONTAINS_TEXT),
    ),
    sort_map={
        "entry_ts": "q.entry_ts",
        "entry_date": "q.entry_date",
        "name": "q.name",
        "employee_number": "q.employee_number",
        "sales_order": "q.sales_order",
        "detail_number": "q.detail_number",
        "flat_or_3d": "q.flat_or_3d",
        "order_quantity": "q.order_quantity",
        "inspected_quantity": "q.inspected_quantity",
        "rejected_quantity": "q.rejected_quantity",
        "quantity_shipped": "q.quantity_shipped",
        # window aliases
        "total_qty_inspected_by_date": "total_qty_inspected_by_date",
        "flat_totals": "flat_totals",
        "three_d_totals": "three_d_totals",
        "flat_totals_by_person": "flat_totals_by_person",
        "three_d_totals_by_person": "three_d_totals_by_person",
        "total_qty_inspected_by_person": "total_qty_inspected_by_person",
    },
    default_sort="entry_ts",
    window_totals=(
        WindowTotal("total_qty_inspected_by_date", "q.inspected_quantity", ("q.entry_date",)),
        WindowTotal("flat_totals", "q.inspected_quantity", ("q.entry_date",), "q.flat_or_3d", ("flat",)),
        WindowTotal("three_d_totals", "q.inspected_quantity", ("q.entry_date",), "q.flat_or_3d", ("3d",)),
        WindowTotal("flat_totals_by_person", "q.inspected_quantity", ("q.entry_date", "q.name"),
                    "q.flat_or_3d", ("flat",)),
        WindowTotal("three_d_totals_by_person", "q.inspected_quantity", ("q.entry_date", "q.name"),
                    "q.flat_or_3d", ("3d",)),
        WindowTotal("total_qty_inspected_by_person", "q.inspected_quantity", ("q.entry_date", "q.name")),
    ),
    grand_totals=(
        GrandTotal("total_inspected_quantity", "q.inspected_quantity"),
        GrandTotal("total_rejected_quantity", "q.rejected_quantity"),
        GrandTotal("total_quantity_shipped", "q.quantity_shipped"),
    ),
    csv_columns=(
        "entry_ts", "name", "sales_order", "detail_number", "flat_or_3d",
        "order_quantity", "inspected_quantity", "rejected_quantity",
        "quantity_shipped", "notes", "entry_date", "total_qty_inspected_by_date",
        "flat_totals", "three_d_totals", "flat_totals_by_person",
        "three_d_totals_by_person", "total_qty_inspected_by_person",
        "employee_number",
    ),
    default_page_size=100,
    search_section=SearchSection(
        key="qc",
        title="QC Daily Production",
        select_columns=(
            "q.id", "q.entry_ts", "q.entry_date", "q.name", "q.employee_number",
            "q.sales_order", "q.detail_number", "q.flat_or_3d", "q.order_quantity",
            "q.inspected_quantity", "q.rejected_quantity", "q.quantity_shipped",
            "q.notes",
        ),
        search_fields=(
            FilterField("name", "q.name"),
            FilterField("flat_or_3d", "q.flat_or_3d"),
            FilterField("notes", "q.notes"),
            FilterField("employee_number", "q.employee_number", CONTAINS_TEXT),
            FilterField("sales_order", "q.sales_order", CONTAINS_TEXT),
            FilterField("detail_number", "q.detail_number", CONTAINS_TEXT),
            FilterField("order_quantity", "q.order_quantity", CONTAINS_TEXT),
            FilterField("inspected_quantity", "q.inspected_quantity", CONTAINS_TEXT),
            FilterField("rejected_quantity", "q.rejected_quantity", CONTAINS_TEXT),
            FilterField("quantity_shipped", "q.quantity_shipped", CONTAINS_TEXT),
            FilterField("entry_date", "q.entry_date", CONTAINS_TEXT),
        ),
    ),
    dashboard_metrics=(
        DashboardMetric("qcFlatInspected",
                        GrandTotal("flat_totals", "q.inspected_quantity", "q.flat_or_3d", ("flat",))),
        DashboardMetric("qc3DInspected",
                        GrandTotal("three_d_totals", "q.inspected_quantity", "q.flat_or_3d", ("3d",))),
        DashboardMetric("qcTotalInspected", GrandTotal("total_inspected", "q.inspected_quantity")),
    ),
    entry_source=EntrySource(table="qc_daily_entries"),
)


# ============================================================================
# EMBLEM PRODUCTION
# ============================================================================

EMBLEM_PRODUCTION = ReportModule(
    key="emblem-production",
    title="Emblem Production",
    from_sql="emblem_daily_submission_lines l JOIN emblem_daily_submissions s ON s.id = l.submission_id",
    date_column="s.entry_date",
    timestamp_column="s.entry_ts",
    id_column="l.id",
    select_columns=(
        "l.id", "s.id AS submission_id", "s.entry_ts", "s.entry_date", "s.name",
        "s.employee_number", "l.sales_order", "l.detail_number", "l.emblem_type",
        "l.logo_name", "l.pieces", "l.line_notes AS notes",
    ),
    filter_fields=(
        FilterField("name", "s.name", CONTAINS),
        FilterField("employee_number", "s.employee_number", CONTAINS_TEXT),
        FilterField("sales_order", "l.sales_order", CONTAINS_TEXT),
        FilterField("detail_number", "l.detail_number", CONTAINS_TEXT),
        FilterField("emblem_type", "l.emblem_type", CONTAINS),
        FilterField("logo_name", "l.logo_name", CONTAINS),
        FilterField("pieces", "l.pieces", CONTAINS_TEXT),
        FilterField("notes", "l.line_notes", CONTAINS),
    ),
    search_fields=(
        FilterField("name", "s.name"),
        FilterField("employee_number", "s.employee_number", CONTAINS_TEXT),
        FilterField("entry_date", "s.entry_date", CONTAINS_TEXT),
        FilterField("sales_order", "l.sales_order", CONTAINS_TEXT),
        FilterField("detail_number", "l.detail_number", CONTAINS_TEXT),
        FilterField("emblem_type", "l.emblem_type"),
        FilterField("logo_name", "l.logo_name"),
        FilterField("pieces", "l.pieces", CONTAINS_TEXT),
        FilterField("notes", "l.line_notes"),
    ),
    sort_map={
        "entry_ts": "s.entry_ts",
        "entry_date": "s.entry_date",
        "name": "s.name",
        "employee_number": "s.employee_number",
        "sales_order": "l.sales_order",
        "detail_number": "l.detail_number",
        "emblem_type": "l.emblem_type",
        "logo_name": "l.logo_name",
        "pieces": "l.pieces",
        # window aliases
        "total_pieces": "total_pieces",
        "sew": "sew",
        "sticker": "sticker",
        "heat_seal": "heat_seal",
        "total_pieces_by_person": "total_pieces_by_person",
        "total_sew_by_person": "total_sew_by_person",
        "total_sticker_by_person": "total_sticker_by_person",
        "total_heat_seal_by_person": "total_heat_seal_by_person",
    },
    default_sort="entry_ts",
    window_totals=(
        WindowTotal("total_pieces", "l.pieces", ("s.entry_date",)),
        WindowTotal("sew", "l.pieces", ("s.entry_date",), "l.emblem_type", ("sew",)),
        WindowTotal("sticker", "l.pieces", ("s.entry_date",), "l.emblem_type", ("sticker",)),
        WindowTotal("heat_seal", "l.pieces", ("s.entry_date",), "l.emblem_type", HEAT_SEAL_VALUES),
        WindowTotal("total_pieces_by_person", "l.pieces", ("s.entry_date", "s.name")),
        WindowTotal("total_sew_by_person", "l.pieces", ("s.entry_date", "s.name"), "l.emblem_type", ("sew",)),
        WindowTotal("total_sticker_by_person", "l.pieces", ("s.entry_date", "s.name"),
                    "l.emblem_type", ("sticker",)),
        WindowTotal("total_heat_seal_by_person", "l.pieces", ("s.entry_date", "s.name"),
                    "l.emblem_type", HEAT_SEAL_VALUES),
    ),
    grand_totals=(
        GrandTotal("total_pieces", "l.pieces"),
    ),
    csv_columns=(
        "entry_ts", "name", "employee_number", "sales_order", "detail_number",
        "emblem_type", "logo_name", "pieces", "notes", "entry_date",
        "total_pieces", "sew", "sticker", "heat_seal", "total_pieces_by_person",
        "total_sew_by_person", "total_sticker_by_person",
        "total_heat_seal_by_person",
    ),
    default_page_size=50,
    search_section=SearchSection(
        key="emblem",
        title="Emblem Production",
        select_columns=(
            "s.id AS submission_id", "s.entry_ts", "s.entry_date", "s.name",
            "s.employee_number", "l.sales_order", "l.detail_number",
            "l.emblem_type", "l.logo_name", "l.pieces", "l.line_notes AS notes",
        ),
        search_fields=(
            FilterField("name", "s.name"),
            FilterField("employee_number", "s.employee_number", CONTAINS_TEXT),
            FilterField("entry_date", "s.entry_date", CONTAINS_TEXT),
            FilterField("sales_order", "l.sales_order", CONTAINS_TEXT),
            FilterField("detail_number", "l.detail_number", CONTAINS_TEXT),
            FilterField("emblem_type", "l.emblem_type"),
            FilterField("logo_name", "l.logo_name"),
            FilterField("pieces", "l.pieces", CONTAINS_TEXT),
            FilterField("notes", "l.line_notes"),
        ),
    ),
    dashboard_metrics=(
        DashboardMetric("emblemSewPieces", GrandTotal("sew", "l.pieces", "l.emblem_type", ("sew",))),
        DashboardMetric("emblemStickerPieces",
                        GrandTotal("sticker", "l.pieces", "l.emblem_type", ("sticker",))),
        DashboardMetric("emblemHeatSealPieces",
                        GrandTotal("heat_seal", "l.pieces", "l.emblem_type", HEAT_SEAL_VALUES)),
        DashboardMetric("emblemTotalPieces", GrandTotal("total_pieces", "l.pieces")),
    ),
    entry_source=EntrySource(
        table="emblem_daily_submissions",
        lines_table="emblem_daily_submission_lines",
        lines_foreign_key="submission_id",
    ),
)


# ============================================================================
# LASER PRODUCTION
# ============================================================================

_LASER_SEARCH_FIELDS = (
    FilterField("name", "l.name"),
    FilterField("employee_number", "l.employee_number", CONTAINS_TEXT),
    FilterField("entry_date", "l.entry_date", CONTAINS_TEXT),
    FilterField("sales_order", "l.sales_order", CONTAINS_TEXT),
    FilterField("leather_style_color", "l.leather_style_color"),
    FilterField("pieces_cut", "l.pieces_cut", CONTAINS_TEXT),
    FilterField("notes", "l.notes"),
)

LASER_PRODUCTION = ReportModule(
    key="laser-production",
    title="Laser Production",
    from_sql="laser_entries l",
    date_column="l.entry_date",
    timestamp_column="l.entry_ts",
    id_column="l.id",
    select_columns=(
        "l.id", "l.entry_ts", "l.entry_date", "l.name", "l.employee_number",
        "l.sales_order", "l.leather_style_color", "l.pieces_cut", "l.notes",
    ),
    filter_fields=(
        FilterField("name", "l.name", CONTAINS),
        FilterField("employee_number", "l.employee_number", CONTAINS_TEXT),
        FilterField("sales_order", "l.sales_order", CONTAINS_TEXT),
        FilterField("leather_style_color", "l.leather_style_color", CONTAINS),
        FilterField("pieces_cut", "l.pieces_cut", CONTAINS_TEXT),
        FilterField("notes", "l.notes", CONTAINS),
    ),
    search_fields=_LASER_SEARCH_FIELDS,
    sort_map={
        "entry_ts": "l.entry_ts",
        "entry_date": "l.entry_date",
        "name": "l.name",
        "employee_number": "l.employee_number",
        "sales_order": "l.sales_order",
        "leather_style_color": "l.leather_style_color",
        "pieces_cut": "l.pieces_cut",
        "notes": "l.notes",
        # window aliases
        "total_pieces_per_day": "total_pieces_per_day",
    },
    default_sort="entry_ts",
    window_totals=(
        WindowTotal("total_pieces_per_day", "l.pieces_cut", ("l.entry_date",)),
    ),
    grand_totals=(
        GrandTotal("total_pieces_cut", "l.pieces_cut"),
    ),
    csv_columns=(
        "entry_ts", "entry_date", "name", "employee_number", "sales_order",
        "leather_style_color", "pieces_cut", "notes", "total_pieces_per_day",
    ),
    default_page_size=50,
    search_section=SearchSection(
        key="laser",
        title="Laser Production",
        select_columns=(
            "l.id", "l.entry_ts", "l.entry_date", "l.name", "l.employee_number",
            "l.sales_order", "l.leather_style_color", "l.pieces_cut", "l.notes",
        ),
        search_fields=_LASER_SEARCH_FIELDS,
    ),
    dashboard_metrics=(
        DashboardMetric("laserTotalPieces", GrandTotal("total_pieces_per_day", "l.pieces_cut")),
    ),
    entry_source=EntrySource(table="laser_entries"),
)


# ============================================================================
# REGISTRY
# ============================================================================

REPORT_MODULES: Tuple[ReportModule, ...] = (
    DAILY_PRODUCTION,
    QC_DAILY_PRODUCTION,
    EMBLEM_PRODUCTION,
    LASER_PRODUCTION,
)

_BY_KEY: Dict[str, ReportModule] = {m.key: m for m in REPORT_MODULES}
_BY_SECTION: Dict[str, ReportModule] = {m.search_section.key: m for m in REPORT_MODULES}


def get_module(key: str) -> Optional[ReportModule]:
    """Look up a module by its report key (e.g. 'laser-production')"""
    return _BY_KEY.get(key)


def get_module_by_section(section_key: str) -> Optional[ReportModule]:
    """Look up a module by its short section key (e.g. 'laser')"""
    return _BY_SECTION.get(section_key)
