"""Models package initialization"""

from .base import Base
from .user import User, UserRole
from .referral import ReferralLink, Referral, ReferralStatus
from .withdrawal import Withdrawal, WithdrawalStatus, COMMITTED_STATUSES
from .adjustment import EarningsAdjustment, AdjustmentType
from .winner import WinnerOfWeek
from .admin_log import AdminLog

# Tables owned by this service
EARNINGS_TABLES = [
    Withdrawal.__table__,
    EarningsAdjustment.__table__,
    WinnerOfWeek.__table__,
    AdminLog.__table__,
]

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "ReferralLink",
    "Referral",
    "ReferralStatus",
    "Withdrawal",
    "WithdrawalStatus",
    "COMMITTED_STATUSES",
    "EarningsAdjustment",
    "AdjustmentType",
    "WinnerOfWeek",
    "AdminLog",
    "EARNINGS_TABLES",
]
