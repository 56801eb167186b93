"""
Report Service (Data Access Layer)

Data access layer for report queries providing reusable query execution on
top of the database adapter. Driver errors are logged and re-raised as
DatabaseError; independent reads can be fanned out on a thread pool.
"""

import sqlite3
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..config import config
from ..database_adapter import DatabaseAdapter, POSTGRES_AVAILABLE
from ..errors import DatabaseError

if POSTGRES_AVAILABLE:
    import psycopg2
    DRIVER_ERRORS = (sqlite3.Error, psycopg2.Error)
else:
    DRIVER_ERRORS = (sqlite3.Error,)

logger = logging.getLogger(__name__)


class ReportService:
    """Base service for executing report queries"""

    def __init__(self, adapter: DatabaseAdapter, max_workers: Optional[int] = None):
        self.adapter = adapter
        self.max_workers = max_workers or config.reports.query_workers

    def execute_query(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Execute a query and return results.

        Args:
            query: SQL query string with '?' placeholders
            params: Query parameters

        Returns:
            List of rows as dictionaries
        """
        try:
            return self.adapter.fetchall(query, params)
        except DRIVER_ERRORS as e:
            logger.error(f"Report query failed: {e}\n  SQL: {query}", exc_info=True)
            raise DatabaseError("Failed to load report data") from e

    def execute_single(self, query: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Execute query and return single result"""
        try:
            return self.adapter.fetchone(query, params)
        except DRIVER_ERRORS as e:
            logger.error(f"Report query failed: {e}\n  SQL: {query}", exc_info=True)
            raise DatabaseError("Failed to load report data") from e

    def execute_scalar(self, query: str, params: Sequence[Any] = (), default: Any = 0) -> Any:
        """Execute query and return the first column of the first row"""
        row = self.execute_single(query, params)
        if not row:
            return default
        value = next(iter(row.values()))
        return default if value is None else value

    def run_concurrently(self, calls: Mapping[str, Callable[[], Any]]) -> Dict[str, Any]:
        """
        Run independent reads on a thread pool.

        Args:
            calls: Name mapped to a zero-argument callable

        Returns:
            Name mapped to each callable's result; the first failure is
            re-raised once every submitted call has finished.
        """
        if len(calls) <= 1 or self.max_workers <= 1:
            return {name: fn() for name, fn in calls.items()}

        results: Dict[str, Any] = {}
        failure: Optional[BaseException] = None

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(calls))) as executor:
            future_to_name = {executor.submit(fn): name for name, fn in calls.items()}

            for future in as_completed(future_to_name):
                try:
                    results[future_to_name[future]] = future.result()
                except Exception as e:
                    if failure is None:
                        failure = e

        if failure is not None:
            raise failure
        return results
