"""
Status transition tables for withdrawals and referrals
"""

from typing import Dict, List, Set

from earnings_api.models import WithdrawalStatus, ReferralStatus

class WithdrawalStateMachine:
    """
    Manages valid withdrawal status transitions

    Resolution is one-way. "paid" is a valid stored status but nothing in
    this service moves a withdrawal into it.
    """

    def __init__(self):
        self.transitions: Dict[str, Set[str]] = {
            WithdrawalStatus.PENDING.value: {
                WithdrawalStatus.APPROVED.value,
                WithdrawalStatus.REJECTED.value,
            },
            WithdrawalStatus.APPROVED.value: set(),
            WithdrawalStatus.REJECTED.value: set(),
            WithdrawalStatus.PAID.value: set(),
        }

    def can_transition(self, current_status: str, new_status: str) -> bool:
        """
        Check if transition is valid

        Args:
            current_status: Current withdrawal status
            new_status: Desired new status

        Returns:
            True if transition is allowed
        """
        return new_status in self.transitions.get(current_status, set())

    def get_valid_transitions(self, current_status: str) -> List[str]:
        return sorted(self.transitions.get(current_status, set()))

    def is_terminal_state(self, status: str) -> bool:
        return len(self.transitions.get(status, set())) == 0

class ReferralStateMachine:
    """Referral approval is decided once"""

    def __init__(self):
        self.transitions: Dict[str, Set[str]] = {
            ReferralStatus.PENDING.value: {
                ReferralStatus.APPROVED.value,
                ReferralStatus.REJECTED.value,
            },
            ReferralStatus.APPROVED.value: set(),
            ReferralStatus.REJECTED.value: set(),
        }

    def can_transition(self, current_status: str, new_status: str) -> bool:
        return new_status in self.transitions.get(current_status, set())
