"""
User model
Identity records are owned by the external registration system and only read here
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from .base import BaseModel, utcnow

class UserRole(str, enum.Enum):
    USER = "user"
    PARTNER = "partner"
    ADMIN = "admin"

class User(BaseModel):
    """Referral program participant"""

    __tablename__ = "users"

    # External identity id (e.g. auth provider uid)
    id = Column(String(128), primary_key=True)
    display_name = Column(String(150))
    email = Column(String(255), index=True)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    partner_id = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    # Relationships
    referral_links = relationship("ReferralLink", back_populates="owner", lazy="noload")
