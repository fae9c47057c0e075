"""
CSV serialisation for admin exports
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence
import csv
import io
import uuid

class NoDataError(ValueError):
    """Raised when an export has no rows"""

def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "value"):
        # Enum members
        return value.value
    return value

def to_csv(
    records: Iterable[Dict[str, Any]],
    fieldnames: Optional[Sequence[str]] = None,
    delimiter: str = ","
) -> str:
    """
    Serialise uniform records to CSV text

    The header comes from ``fieldnames`` or the first record's keys. Values
    that contain the delimiter, a quote or a newline are quoted.

    Raises:
        NoDataError: If there are no records
    """
    rows: List[Dict[str, Any]] = list(records)
    if not rows:
        raise NoDataError("No data to export")

    header = list(fieldnames or rows[0].keys())
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=header,
        delimiter=delimiter,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
        extrasaction="ignore",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _cell(row.get(key)) for key in header})
    return buffer.getvalue()
