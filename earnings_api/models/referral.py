"""Referral system models"""

from sqlalchemy import Column, String, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, TimestampedModel, UUIDModel

class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ReferralLink(BaseModel, UUIDModel, TimestampedModel):
    """Per-operator referral link owned by a user"""

    __tablename__ = "referral_links"

    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    operator = Column(String(50), nullable=False)  # Airtel, Vi, Jio
    referral_code = Column(String(50), nullable=False, unique=True)

    # Relationships
    owner = relationship("User", back_populates="referral_links", lazy="noload")
    referrals = relationship("Referral", back_populates="referral_link", lazy="noload")

class Referral(BaseModel, UUIDModel, TimestampedModel):
    """A lead submitted through a referral link; approval earns the reward"""

    __tablename__ = "referrals"

    referral_link_id = Column(UUID(as_uuid=True), ForeignKey("referral_links.id"), nullable=False, index=True)
    referred_name = Column(String(150), nullable=False)
    status = Column(String(20), nullable=False, default=ReferralStatus.PENDING.value)  # pending, approved, rejected

    # Relationships
    referral_link = relationship("ReferralLink", back_populates="referrals", lazy="noload")

    __table_args__ = (
        Index("idx_referrals_link_status", "referral_link_id", "status"),
    )
