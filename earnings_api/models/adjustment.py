"""Manual earnings adjustments"""

from sqlalchemy import Column, String, Numeric, Text
import enum

from .base import BaseModel, TimestampedModel, UUIDModel

class AdjustmentType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"

class EarningsAdjustment(BaseModel, UUIDModel, TimestampedModel):
    """Append-only admin correction on top of computed earnings"""

    __tablename__ = "earnings_adjustments"

    user_id = Column(String(128), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)  # signed: debits are negative
    adjustment_type = Column(String(20), nullable=False)
    reason = Column(Text, nullable=False)
    admin_username = Column(String(150), nullable=False)
