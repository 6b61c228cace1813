"""CSV export of report rows."""

import csv
import io
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class ColumnSpec:
    """One CSV column: where its value comes from and its header.

    ``key`` is a mapping key or attribute name of the row. ``formatter``
    turns the raw value into the cell text; without one, numbers are written
    as plain numbers and missing values as empty cells.
    """

    key: str
    header: str
    formatter: Optional[Callable[[Any], str]] = None


def _value(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value.normalize() if value == value.to_integral() else value, "f")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def to_csv(rows: Iterable[Any], columns: Sequence[ColumnSpec]) -> str:
    """Render rows as CSV text with a header row taken from the columns."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([column.header for column in columns])
    for row in rows:
        cells = []
        for column in columns:
            value = _value(row, column.key)
            formatter = column.formatter or format_cell
            cells.append(formatter(value))
        writer.writerow(cells)
    return buffer.getvalue()


def write_csv(path: Path | str, rows: Iterable[Any], columns: Sequence[ColumnSpec]) -> Path:
    """Write rows to a CSV file, returning its path."""
    path = Path(path)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(to_csv(rows, columns))
    return path
