"""Utilities package"""

from .validators import normalize_operator, parse_amount, sanitize_text, validate_user_id
from .helpers import format_amount, quantize_amount, week_window
from .csv_export import NoDataError, to_csv

__all__ = [
    "normalize_operator",
    "parse_amount",
    "sanitize_text",
    "validate_user_id",
    "format_amount",
    "quantize_amount",
    "week_window",
    "NoDataError",
    "to_csv"
]
