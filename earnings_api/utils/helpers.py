"""
Helper utilities
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

TWO_PLACES = Decimal("0.01")

def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """
    Coerce a store value to Decimal

    Aggregates come back as Decimal, int or float depending on the driver.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def quantize_amount(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Round to two fraction digits"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

def format_amount(value: Union[Decimal, int, float, str, None]) -> str:
    """
    Format amount with two fraction digits

    Args:
        value: Amount to format

    Returns:
        String such as "300.00"
    """
    return f"{quantize_amount(value):.2f}"

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def week_window(now: Optional[datetime] = None, tz_name: str = "UTC") -> Tuple[date, date]:
    """
    Sunday-to-Saturday week containing ``now``

    Args:
        now: Reference time (defaults to current time)
        tz_name: Timezone in which the calendar day is taken

    Returns:
        (week_start, week_end) as dates
    """
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(ZoneInfo(tz_name)).date()

    # Monday is 0, so Sunday maps to 0 days back
    days_since_sunday = (today.weekday() + 1) % 7
    week_start = today - timedelta(days=days_since_sunday)
    return week_start, week_start + timedelta(days=6)
