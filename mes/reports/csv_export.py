"""
CSV Export

Renders the full (unpaged) report result as CSV text with a fixed column
order per module. Quoting is minimal: a field is quoted only when it holds a
comma, double quote, CR or LF, with internal quotes doubled.
"""

import io
import csv
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Sequence


def format_csv_value(value: Any) -> str:
    """Text form of a single cell"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def render_csv(rows: Iterable[Dict[str, Any]], columns: Sequence[str]) -> str:
    """
    Render rows as CSV.

    Args:
        rows: Result rows as dictionaries; missing keys become empty cells
        columns: Header names, also the order cells are written in

    Returns:
        Header line followed by one line per row
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([format_csv_value(row.get(col)) for col in columns])
    return output.getvalue()


def csv_filename(module_key: str) -> str:
    return f"{module_key}-all.csv"


def csv_headers(module_key: str) -> Dict[str, str]:
    """Response headers for a CSV download"""
    return {
        "Content-Disposition": f'attachment; filename="{csv_filename(module_key)}"',
        "Cache-Control": "no-store",
    }
