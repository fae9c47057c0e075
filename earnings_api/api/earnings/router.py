"""
Earnings API routes
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict, Any
import logging

from earnings_api.core.database import get_db, get_referral_db
from earnings_api.core.exceptions import UnauthorizedException, ForbiddenException, ValidationException
from earnings_api.core.security import get_current_user, require_owner, ensure_owner, is_admin, security
from earnings_api.services.withdrawal_service import WithdrawalService
from earnings_api.services.winners import WinnersService
from earnings_api.utils.validators import normalize_operator
from .schemas import (
    ValidateTokenRequest,
    ValidateTokenResponse,
    WithdrawalCreate,
    WithdrawalCreatedResponse,
    DashboardResponse,
    EarningsHistoryResponse,
    WithdrawalListResponse,
    ReferralLinksResponse,
    WinnersResponse,
    UserOut,
)
from .services import EarningsService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "/validate-token",
    response_model=ValidateTokenResponse,
    summary="Validate user token",
    description="Verify a signed user token and return the user it belongs to"
)
async def validate_token(
    request: ValidateTokenRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Validate token from body or bearer header"""
    token = request.token or (credentials.credentials if credentials else None)
    if not token:
        raise UnauthorizedException("Missing token", error_code="UNAUTHENTICATED")

    service = EarningsService(db, referral_db)
    user = await service.validate_token(token, request.uid)
    return ValidateTokenResponse(user=UserOut.model_validate(user))

@router.get(
    "/dashboard/{user_id}",
    response_model=DashboardResponse,
    summary="Earnings dashboard",
    description="Lifetime earnings, balance and per-operator breakdown"
)
async def get_dashboard(
    user_id: str,
    current_user: Dict[str, Any] = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Get dashboard summary"""
    service = EarningsService(db, referral_db)
    summary = await service.dashboard(user_id)
    return DashboardResponse.model_validate(summary)

@router.get(
    "/history/{user_id}",
    response_model=EarningsHistoryResponse,
    summary="Earnings history"
)
async def get_earnings_history(
    user_id: str,
    operator: Optional[str] = Query(None, description="Only referrals for this operator"),
    current_user: Dict[str, Any] = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Get referral history with earned amounts"""
    if operator:
        try:
            operator = normalize_operator(operator)
        except ValueError as e:
            raise ValidationException(str(e))

    service = EarningsService(db, referral_db)
    history = await service.earnings_history(user_id, operator)
    return EarningsHistoryResponse(earnings_history=history)

@router.get(
    "/withdrawals/{user_id}",
    response_model=WithdrawalListResponse,
    summary="Withdrawal history"
)
async def get_withdrawals(
    user_id: str,
    current_user: Dict[str, Any] = Depends(require_owner),
    db: AsyncSession = Depends(get_db)
):
    """Get user withdrawals, newest first"""
    service = WithdrawalService(db)
    withdrawals = await service.list_for_user(user_id)
    return WithdrawalListResponse(withdrawals=withdrawals)

@router.get(
    "/referral-links/{user_id}",
    response_model=ReferralLinksResponse,
    summary="Referral links"
)
async def get_referral_links(
    user_id: str,
    current_user: Dict[str, Any] = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Get user referral links, newest first"""
    service = EarningsService(db, referral_db)
    links = await service.referral_links(user_id)
    return ReferralLinksResponse(referral_links=links)

@router.post(
    "/request-withdrawal",
    response_model=WithdrawalCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request withdrawal",
    description="Create a pending withdrawal if no other is pending and the balance covers it"
)
async def request_withdrawal(
    withdrawal_data: WithdrawalCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Request withdrawal"""
    if is_admin(current_user):
        raise ForbiddenException("Withdrawals must be requested by the earning user")

    user_id = withdrawal_data.uid or current_user["id"]
    ensure_owner(current_user, user_id)

    service = WithdrawalService(db, referral_db)
    result = await service.request_withdrawal(
        user_id=user_id,
        operator=withdrawal_data.operator,
        amount=withdrawal_data.requested_amount
    )
    return WithdrawalCreatedResponse(
        withdrawal=result.withdrawal,
        remaining_balance=result.remaining_balance
    )

@router.get(
    "/winners-of-week",
    response_model=WinnersResponse,
    summary="Winners of the week"
)
async def get_winners_of_week(
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Curated winners for this week, or the rolling leaderboard"""
    service = WinnersService(db, referral_db)
    result = await service.get_winners()
    return WinnersResponse(
        source=result.source,
        week_start=result.week_start,
        week_end=result.week_end,
        winners=result.winners
    )
