"""
Database Schema Definition

Production-entry tables read by the reports: embroidery daily entries, QC
daily entries, emblem submissions with their lines, and laser entries.
Written in SQLite DDL; adapters normalize it for their dialect.
"""

import logging

from .database_adapter import DatabaseAdapter

logger = logging.getLogger(__name__)

PRODUCTION_TABLES = (
    "embroidery_daily_entries",
    "qc_daily_entries",
    "emblem_daily_submissions",
    "emblem_daily_submission_lines",
    "laser_entries",
)


def get_schema_sql() -> str:
    """Get the complete database schema SQL"""
    return """
CREATE TABLE IF NOT EXISTS embroidery_daily_entries (
    id TEXT PRIMARY KEY,
    entry_ts TIMESTAMP NOT NULL,
    shift_date DATE NOT NULL,
    name TEXT NOT NULL,
    employee_number INTEGER,
    shift TEXT,
    machine_number INTEGER,
    sales_order INTEGER,
    detail_number INTEGER,
    embroidery_location TEXT,
    stitches INTEGER,
    pieces INTEGER,
    is_3d BOOLEAN NOT NULL DEFAULT FALSE,
    is_knit BOOLEAN NOT NULL DEFAULT FALSE,
    detail_complete BOOLEAN NOT NULL DEFAULT FALSE,
    notes TEXT,
    total_stitches INTEGER,
    dozens REAL
);

CREATE INDEX IF NOT EXISTS idx_embroidery_shift_date ON embroidery_daily_entries(shift_date);
CREATE INDEX IF NOT EXISTS idx_embroidery_employee ON embroidery_daily_entries(employee_number);

CREATE TABLE IF NOT EXISTS qc_daily_entries (
    id TEXT PRIMARY KEY,
    entry_ts TIMESTAMP NOT NULL,
    entry_date DATE NOT NULL,
    name TEXT NOT NULL,
    employee_number INTEGER,
    sales_order INTEGER,
    detail_number INTEGER,
    flat_or_3d TEXT,
    order_quantity INTEGER,
    inspected_quantity INTEGER,
    rejected_quantity INTEGER,
    quantity_shipped INTEGER,
    notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_qc_entry_date ON qc_daily_entries(entry_date);
CREATE INDEX IF NOT EXISTS idx_qc_employee ON qc_daily_entries(employee_number);

CREATE TABLE IF NOT EXISTS emblem_daily_submissions (
    id TEXT PRIMARY KEY,
    entry_ts TIMESTAMP NOT NULL,
    entry_date DATE NOT NULL,
    name TEXT NOT NULL,
    employee_number INTEGER,
    notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_emblem_entry_date ON emblem_daily_submissions(entry_date);

CREATE TABLE IF NOT EXISTS emblem_daily_submission_lines (
    id TEXT PRIMARY KEY,
    submission_id TEXT NOT NULL REFERENCES emblem_daily_submissions(id) ON DELETE CASCADE,
    sales_order INTEGER,
    detail_number INTEGER,
    emblem_type TEXT,
    logo_name TEXT,
    pieces INTEGER,
    line_notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_emblem_lines_submission ON emblem_daily_submission_lines(submission_id);

CREATE TABLE IF NOT EXISTS laser_entries (
    id TEXT PRIMARY KEY,
    entry_ts TIMESTAMP NOT NULL,
    entry_date DATE NOT NULL,
    name TEXT NOT NULL,
    employee_number INTEGER,
    sales_order INTEGER,
    leather_style_color TEXT,
    pieces_cut INTEGER,
    notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_laser_entry_date ON laser_entries(entry_date);
"""


def ensure_schema(adapter: DatabaseAdapter) -> None:
    """Create the production tables if they do not exist yet"""
    adapter.execute_script(get_schema_sql())
    logger.info(f"Schema ensured for {len(PRODUCTION_TABLES)} production tables")
