"""
================================================================================
Apparel MES Reports - Unified Test Configuration and Fixtures
================================================================================
Description:
    Shared pytest configuration and fixtures for all tests (unit and API).
    Provides a temporary SQLite database seeded with production entries, an
    application wired to it, and session-cookie helpers.

Fixtures:
    - adapter: SQLite adapter on a temporary file with the schema applied
    - seeded_adapter: adapter populated with embroidery, QC, emblem and laser rows
    - app / client: FastAPI app and TestClient bound to the seeded database
    - make_token: signs session tokens for arbitrary users
    - client_for: TestClient carrying a session cookie for a given role

Seed data (dates relative to today, see SEED_* constants):
    - 5 embroidery entries (4 inside the default 30-day window)
    - 4 QC entries, 3 emblem submissions with 5 lines, 3 laser entries
================================================================================
"""
import os
import sys
from pathlib import Path
from datetime import date, datetime, timedelta

# Configuration is read once at import time; pin it before importing mes
os.environ['MES_ENVIRONMENT'] = 'testing'
os.environ['MES_JWT_SECRET'] = 'test-secret-key-for-session-tokens'
os.environ['MES_CONFIG_FILE'] = str(Path(__file__).parent / '.config.test.json')

import pytest

# Add project root to path for all tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


TODAY = date.today()
YESTERDAY = TODAY - timedelta(days=1)
THREE_DAYS_AGO = TODAY - timedelta(days=3)
TWO_DAYS_AGO = TODAY - timedelta(days=2)
FORTY_DAYS_AGO = TODAY - timedelta(days=40)
SIXTY_DAYS_AGO = TODAY - timedelta(days=60)


def _ts(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


EMBROIDERY_ROWS = [
    # id, entry_ts, shift_date, name, employee_number, shift, machine_number, sales_order,
    # detail_number, embroidery_location, stitches, pieces, is_3d, is_knit, detail_complete,
    # notes, total_stitches, dozens
    ('e1', _ts(TODAY, 8), TODAY, 'Alice Smith', 1001, '1st', 3, 7001234, 1, 'Left Chest',
     5000, 10, True, False, True, 'rush', 50000, 0.83),
    ('e2', _ts(TODAY, 9), TODAY, 'Alice Smith', 1001, '1st', 3, 7005555, 2, 'Full Back',
     12000, 4, False, False, False, 'Hello, "World"', 48000, 0.33),
    ('e3', _ts(TODAY, 10), TODAY, 'Bob Jones', 1002, '2nd', 5, 7001299, 1, 'Sleeve',
     3000, 20, False, True, False, None, 60000, 1.67),
    ('e4', _ts(YESTERDAY, 10), YESTERDAY, 'Bob Jones', 1002, '2nd', 5, 8123456, 3, 'Left Chest',
     4000, 12, True, False, True, 'multi\nline', 48000, 1.0),
    ('e5', _ts(SIXTY_DAYS_AGO, 10), SIXTY_DAYS_AGO, 'Carol White', 1003, '1st', 7, 7001234, 1,
     'Hat Front', 6000, 8, True, False, False, 'archived', 48000, 0.67),
]

QC_ROWS = [
    # id, entry_ts, entry_date, name, employee_number, sales_order, detail_number, flat_or_3d,
    # order_quantity, inspected_quantity, rejected_quantity, quantity_shipped, notes
    ('q1', _ts(TODAY, 8), TODAY, 'Dana Lee', 2001, 7001234, 1, 'Flat', 100, 90, 2, 88, 'ok'),
    ('q2', _ts(TODAY, 9), TODAY, 'Dana Lee', 2001, 7002000, 2, '3D', 50, 40, 1, 39, None),
    ('q3', _ts(TODAY, 10), TODAY, 'Evan Park', 2002, 7003000, 1, 'flat', 30, 30, 0, 30, 'check'),
    ('q4', _ts(THREE_DAYS_AGO, 10), THREE_DAYS_AGO, 'Evan Park', 2002, 7004000, 1, '3d',
     20, 20, 0, 20, None),
]

EMBLEM_SUBMISSIONS = [
    # id, entry_ts, entry_date, name, employee_number, notes
    ('s1', _ts(TODAY, 7, 30), TODAY, 'Faye Kim', 3001, 'am'),
    ('s2', _ts(TODAY, 11), TODAY, 'Gus Diaz', 3002, None),
    ('s3', _ts(FORTY_DAYS_AGO, 9), FORTY_DAYS_AGO, 'Gus Diaz', 3002, None),
]

EMBLEM_LINES = [
    # id, submission_id, sales_order, detail_number, emblem_type, logo_name, pieces, line_notes
    ('l1', 's1', 7001234, 1, 'Sew', 'Eagle', 24, 'line one'),
    ('l2', 's1', 7001235, 2, 'Sticker', 'Hawk', 10, None),
    ('l3', 's1', 7001236, 1, 'Heat Seal', 'Owl', 6, None),
    ('l4', 's2', 7009999, 1, 'heat_seal', 'Bear', 4, 'rework'),
    ('l5', 's3', 7001234, 1, 'sew', 'Fox', 12, None),
]

LASER_ROWS = [
    # id, entry_ts, entry_date, name, employee_number, sales_order, leather_style_color,
    # pieces_cut, notes
    ('z1', _ts(TODAY, 12), TODAY, 'Hank Moss', 4001, 7001234, 'Brown/Tan', 30, 'first run'),
    ('z2', _ts(TODAY, 13), TODAY, 'Hank Moss', 4001, 7002222, 'Black', 15, None),
    ('z3', _ts(TWO_DAYS_AGO, 9), TWO_DAYS_AGO, 'Ivy Chen', 4002, 7003333, 'Brown/Tan', 20, None),
]


def seed_database(adapter):
    """Insert the fixture rows"""
    adapter.execute_many(
        "INSERT INTO embroidery_daily_entries (id, entry_ts, shift_date, name, employee_number, shift, "
        "machine_number, sales_order, detail_number, embroidery_location, stitches, pieces, is_3d, "
        "is_knit, detail_complete, notes, total_stitches, dozens) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        EMBROIDERY_ROWS
    )
    adapter.execute_many(
        "INSERT INTO qc_daily_entries (id, entry_ts, entry_date, name, employee_number, sales_order, "
        "detail_number, flat_or_3d, order_quantity, inspected_quantity, rejected_quantity, "
        "quantity_shipped, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        QC_ROWS
    )
    adapter.execute_many(
        "INSERT INTO emblem_daily_submissions (id, entry_ts, entry_date, name, employee_number, notes) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        EMBLEM_SUBMISSIONS
    )
    adapter.execute_many(
        "INSERT INTO emblem_daily_submission_lines (id, submission_id, sales_order, detail_number, "
        "emblem_type, logo_name, pieces, line_notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        EMBLEM_LINES
    )
    adapter.execute_many(
        "INSERT INTO laser_entries (id, entry_ts, entry_date, name, employee_number, sales_order, "
        "leather_style_color, pieces_cut, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        LASER_ROWS
    )


@pytest.fixture
def adapter(tmp_path):
    """SQLite adapter on a temporary database with the production schema"""
    from mes.database_adapter import SQLiteAdapter
    from mes.database_schema import ensure_schema

    db = SQLiteAdapter(tmp_path / "mes_test.db")
    ensure_schema(db)
    return db


@pytest.fixture
def seeded_adapter(adapter):
    """Adapter populated with the fixture rows"""
    seed_database(adapter)
    return adapter


@pytest.fixture
def app(seeded_adapter):
    """Application bound to the seeded database"""
    from mes.app import create_app
    return create_app(seeded_adapter)


@pytest.fixture
def client(app):
    """Create a FastAPI test client without a session cookie"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def make_token():
    """Factory signing session tokens"""
    from mes.auth import SessionUser, issue_session_token

    def _make(role='ADMIN', employee_number=9000, username=None, name=None, ttl_hours=None):
        user = SessionUser(
            username=username or f"{role.lower()}.user",
            name=name or f"{role.title()} User",
            employee_number=employee_number,
            role=role,
            shift='1st',
            department='Embroidery'
        )
        return issue_session_token(user, ttl_hours=ttl_hours)

    return _make


@pytest.fixture
def client_for(app, make_token):
    """Factory creating a TestClient that carries a session cookie"""
    from fastapi.testclient import TestClient
    from mes.config import config

    def _client(role='ADMIN', employee_number=9000, **kwargs):
        test_client = TestClient(app)
        test_client.cookies.set(config.auth.cookie_name, make_token(role, employee_number, **kwargs))
        return test_client

    return _client


@pytest.fixture
def admin_client(client_for):
    """TestClient authenticated as an ADMIN"""
    return client_for('ADMIN')
