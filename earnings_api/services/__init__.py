"""Services package"""

from .audit_service import AuditService
from .balance import BalanceService, BalanceSummary
from .state_machine import WithdrawalStateMachine, ReferralStateMachine
from .withdrawal_service import WithdrawalService
from .winners import WinnersService

__all__ = [
    "AuditService",
    "BalanceService",
    "BalanceSummary",
    "WithdrawalStateMachine",
    "ReferralStateMachine",
    "WithdrawalService",
    "WinnersService"
]
