"""Admin audit log model"""

from sqlalchemy import Column, String, Text, JSON

from .base import BaseModel, TimestampedModel, UUIDModel

class AdminLog(BaseModel, UUIDModel, TimestampedModel):
    """Log all admin actions for audit trail"""

    __tablename__ = "admin_logs"

    admin_username = Column(String(150), nullable=False, index=True)
    action = Column(String(100), nullable=False)  # resolve_withdrawal, adjust_earnings, set_winners
    entity_type = Column(String(50), nullable=False)  # withdrawal, user, referral, winners
    entity_id = Column(String(200), nullable=False)
    description = Column(Text)
    old_values = Column(JSON)  # Store previous state
    new_values = Column(JSON)  # Store new state
    ip_address = Column(String(45))
    user_agent = Column(String(500))
