"""
Database Adapter Layer

Database abstraction supporting SQLite (default) and PostgreSQL. Queries are
written once with '?' placeholders; each adapter normalizes them for its
driver and returns rows as plain dictionaries.
"""

import sqlite3
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Any, Dict, List, Sequence
from contextlib import contextmanager
from abc import ABC, abstractmethod

try:
    import psycopg2
    from psycopg2.extras import RealDictCursor
    POSTGRES_AVAILABLE = True
except ImportError:
    POSTGRES_AVAILABLE = False

from .config import config

# Explicit adapters/converters (the sqlite3 defaults are deprecated since 3.12)
sqlite3.register_adapter(datetime, lambda dt: dt.isoformat(sep=" "))
sqlite3.register_adapter(date, lambda d: d.isoformat())
sqlite3.register_converter("timestamp", lambda b: datetime.fromisoformat(b.decode()))
sqlite3.register_converter("date", lambda b: date.fromisoformat(b.decode()))
sqlite3.register_converter("boolean", lambda b: b not in (b"0", b""))


def _unicode_lower(value: Any) -> Any:
    """LOWER() replacement folding non-ASCII letters the way str.lower() does"""
    return value.lower() if isinstance(value, str) else value


class DatabaseAdapter(ABC):
    """Abstract base class for database adapters"""

    @abstractmethod
    @contextmanager
    def get_connection(self):
        """Get a database connection"""
        pass

    @abstractmethod
    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement and return the affected row count"""
        pass

    @abstractmethod
    def execute_many(self, query: str, params_list: List[Sequence[Any]]) -> None:
        """Execute a statement with multiple parameter sets"""
        pass

    @abstractmethod
    def execute_script(self, script: str) -> None:
        """Execute several ';'-separated statements"""
        pass

    @abstractmethod
    def fetchall(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all results"""
        pass

    @abstractmethod
    def fetchone(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch one result"""
        pass

    @abstractmethod
    def normalize_sql(self, sql: str) -> str:
        """Normalize SQL syntax for the database type"""
        pass


class SQLiteAdapter(DatabaseAdapter):
    """SQLite database adapter"""

    def __init__(self, db_path: Path, timeout: float = 30.0):
        self.db_path = db_path
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        db_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new SQLite connection"""
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout,
            check_same_thread=False,
            detect_types=sqlite3.PARSE_DECLTYPES
        )
        # Built-in LOWER only folds ASCII; search patterns are lowercased in Python
        conn.create_function("LOWER", 1, _unicode_lower, deterministic=True)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute(f"PRAGMA journal_mode = {config.database.journal_mode}")
        conn.execute("PRAGMA synchronous = NORMAL")
        return conn

    @contextmanager
    def get_connection(self):
        """Get a SQLite connection"""
        conn = self._create_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement"""
        with self.get_connection() as conn:
            cursor = conn.execute(self.normalize_sql(query), tuple(params or ()))
            return cursor.rowcount

    def execute_many(self, query: str, params_list: List[Sequence[Any]]) -> None:
        """Execute a statement with multiple parameter sets"""
        with self.get_connection() as conn:
            conn.executemany(self.normalize_sql(query), [tuple(p) for p in params_list])

    def execute_script(self, script: str) -> None:
        """Execute several statements"""
        with self.get_connection() as conn:
            conn.executescript(self.normalize_sql(script))

    def fetchall(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all results"""
        with self.get_connection() as conn:
            cursor = conn.execute(self.normalize_sql(query), tuple(params or ()))
            return [dict(row) for row in cursor.fetchall()]

    def fetchone(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch one result"""
        with self.get_connection() as conn:
            cursor = conn.execute(self.normalize_sql(query), tuple(params or ()))
            row = cursor.fetchone()
            return dict(row) if row else None

    def normalize_sql(self, sql: str) -> str:
        """SQLite accepts the canonical '?' dialect as-is"""
        return sql


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter"""

    def __init__(self, host: str, database: str, username: str = "",
                 password: str = "", port: int = 5432, timeout: int = 30):
        if not POSTGRES_AVAILABLE:
            raise ImportError(
                "PostgreSQL support requires psycopg2. "
                "Install with: pip install psycopg2-binary"
            )

        self.host = host
        self.database = database
        self.username = username
        self.password = password
        self.port = port
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_connection(self):
        """Create a new PostgreSQL connection"""
        try:
            return psycopg2.connect(
                host=self.host,
                database=self.database,
                user=self.username,
                password=self.password,
                port=self.port,
                connect_timeout=self.timeout
            )
        except psycopg2.Error as e:
            self.logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise

    @contextmanager
    def get_connection(self):
        """Get a PostgreSQL connection"""
        conn = self._create_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(self.normalize_sql(query), tuple(params or ()))
            return cursor.rowcount

    def execute_many(self, query: str, params_list: List[Sequence[Any]]) -> None:
        """Execute a statement with multiple parameter sets"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.executemany(self.normalize_sql(query), [tuple(p) for p in params_list])

    def execute_script(self, script: str) -> None:
        """Execute several statements"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(self.normalize_sql(script))

    def fetchall(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Fetch all results"""
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            cursor.execute(self.normalize_sql(query), tuple(params or ()))
            return [dict(row) for row in cursor.fetchall()]

    def fetchone(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Fetch one result"""
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            cursor.execute(self.normalize_sql(query), tuple(params or ()))
            row = cursor.fetchone()
            return dict(row) if row else None

    def normalize_sql(self, sql: str) -> str:
        """Normalize SQL syntax for PostgreSQL"""
        # psycopg2 uses pyformat placeholders
        sql = sql.replace("?", "%s")
        sql = sql.replace("INTEGER PRIMARY KEY AUTOINCREMENT", "SERIAL PRIMARY KEY")
        sql = sql.replace("REAL", "DOUBLE PRECISION")
        return sql


def get_database_adapter() -> DatabaseAdapter:
    """Get the appropriate database adapter based on configuration"""
    db_config = config.database

    if db_config.db_type == "postgresql":
        return PostgreSQLAdapter(
            host=db_config.postgresql_host,
            database=db_config.postgresql_database,
            username=db_config.postgresql_username,
            password=db_config.postgresql_password,
            port=db_config.postgresql_port,
            timeout=db_config.connection_timeout
        )

    return SQLiteAdapter(
        db_path=db_config.path,
        timeout=db_config.connection_timeout
    )
