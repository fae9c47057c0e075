"""
Earnings schemas for request/response validation
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
import uuid

from earnings_api.schemas.base import BaseSchema, CamelSchema, SuccessResponse, Money
from earnings_api.utils.validators import normalize_operator, parse_amount, validate_user_id

# Requests

class ValidateTokenRequest(CamelSchema):
    """Token may come in the body or as a bearer header"""
    token: Optional[str] = None
    uid: Optional[str] = None

class WithdrawalCreate(CamelSchema):
    """Request to withdraw earnings"""
    operator: str = Field(..., description="Operator the payout goes through", examples=["Airtel"])
    requested_amount: Decimal = Field(..., description="Amount to withdraw", examples=["300.00"])
    uid: Optional[str] = Field(None, description="Must match the authenticated user when given")

    @field_validator("operator")
    @classmethod
    def validate_operator(cls, v):
        return normalize_operator(v)

    @field_validator("requested_amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Invalid withdrawal amount")
        if isinstance(v, bool):
            raise ValueError("Invalid withdrawal amount")
        return parse_amount(v)

    @field_validator("uid")
    @classmethod
    def validate_uid(cls, v):
        return validate_user_id(v) if v is not None else v

    model_config = {
        "json_schema_extra": {
            "example": {
                "operator": "Airtel",
                "requestedAmount": 300,
                "uid": "user-123"
            }
        }
    }

# Rows

class UserOut(CamelSchema):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None
    partner_id: Optional[str] = None
    created_at: Optional[datetime] = None

class OperatorEarningsRow(BaseSchema):
    operator: str
    total_referrals: int
    approved_referrals_count: int
    total_amount: Money

class EarningsHistoryRow(BaseSchema):
    id: uuid.UUID
    operator: str
    referred_person_name: str
    amount_earned: Money
    status: str
    created_at: Optional[datetime] = None

class WithdrawalRow(BaseSchema):
    id: uuid.UUID
    user_id: str
    operator: str
    requested_amount: Money
    status: str
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None

class ReferralLinkRow(BaseSchema):
    id: uuid.UUID
    operator: str
    referral_code: str
    created_at: Optional[datetime] = None

class WinnerRow(BaseSchema):
    position: int
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    total_earnings: Money
    message: Optional[str] = None

# Responses

class ValidateTokenResponse(SuccessResponse):
    user: UserOut

class DashboardResponse(SuccessResponse):
    total_earnings: Money
    current_balance: Money
    total_withdrawn: Money
    total_adjustments: Money
    user_earnings: List[OperatorEarningsRow]

class EarningsHistoryResponse(SuccessResponse):
    earnings_history: List[EarningsHistoryRow]

class WithdrawalListResponse(SuccessResponse):
    withdrawals: List[WithdrawalRow]

class ReferralLinksResponse(SuccessResponse):
    referral_links: List[ReferralLinkRow]

class WithdrawalCreatedResponse(SuccessResponse):
    withdrawal: WithdrawalRow
    remaining_balance: Money

class WinnersResponse(SuccessResponse):
    source: str
    week_start: date
    week_end: date
    winners: List[WinnerRow]
