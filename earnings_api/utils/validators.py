"""Custom validators and sanitizers"""

from typing import Optional
from decimal import Decimal, InvalidOperation
import re
import bleach

from earnings_api.core.config import settings

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.:@-]{1,128}$")

def normalize_operator(operator: str) -> str:
    """Match an operator name case-insensitively against the supported list"""
    candidate = (operator or "").strip().lower()
    for known in settings.SUPPORTED_OPERATORS:
        if known.lower() == candidate:
            return known
    raise ValueError(
        f"Unknown operator '{operator}'. Supported: {', '.join(settings.SUPPORTED_OPERATORS)}"
    )

def validate_user_id(user_id: str) -> str:
    user_id = (user_id or "").strip()
    if not USER_ID_PATTERN.match(user_id):
        raise ValueError("Invalid user id")
    return user_id

def parse_amount(value) -> Decimal:
    """Parse a positive amount with at most two fraction digits"""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("Invalid amount")
    if not amount.is_finite() or amount <= 0:
        raise ValueError("Amount must be a positive number")
    if amount.as_tuple().exponent < -2:
        raise ValueError("Amount cannot have more than 2 decimal places")
    return amount

def sanitize_text(text: Optional[str], max_length: int = 1000) -> Optional[str]:
    """Strip markup from free-text admin input"""
    if text is None:
        return None
    text = text.replace("\x00", "")
    cleaned = bleach.clean(text, tags=[], attributes={}, strip=True).strip()
    return cleaned[:max_length] or None
