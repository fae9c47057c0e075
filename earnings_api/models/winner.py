"""Curated winners of the week"""

from sqlalchemy import Column, String, Integer, Numeric, Date, Text, UniqueConstraint, CheckConstraint

from .base import BaseModel, TimestampedModel, UUIDModel

class WinnerOfWeek(BaseModel, UUIDModel, TimestampedModel):
    """Admin-selected winner for one Sunday-Saturday week"""

    __tablename__ = "winners_of_week"

    user_id = Column(String(128), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)
    message = Column(Text, nullable=True)
    week_start = Column(Date, nullable=False, index=True)
    week_end = Column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("week_start", "position", name="uq_winners_week_position"),
        CheckConstraint("position >= 1", name="check_winner_position"),
    )
