"""Admin earnings management endpoints"""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict, Any
import uuid
import logging

from earnings_api.core.database import get_db, get_referral_db
from earnings_api.core.exceptions import UnauthorizedException, NotFoundException
from earnings_api.core.security import SecurityUtils, require_admin
from earnings_api.middleware.rate_limit import admin_login_limit
from earnings_api.models import WithdrawalStatus
from earnings_api.services.audit_service import AuditService
from earnings_api.services.withdrawal_service import WithdrawalService
from earnings_api.services.winners import WinnersService
from earnings_api.utils.csv_export import NoDataError, to_csv
from earnings_api.utils.helpers import utc_now
from earnings_api.api.earnings.schemas import UserOut
from .schemas import (
    AdminLogin,
    AdminLoginResponse,
    AdminOut,
    AdminUsersResponse,
    AdminUserDetailResponse,
    AdminWithdrawalsResponse,
    WithdrawalResolve,
    WithdrawalResolvedResponse,
    EarningsAdjustmentCreate,
    AdjustmentCreatedResponse,
    ReferralStatusUpdate,
    ReferralStatusResponse,
    SetWinners,
    SetWinnersResponse,
    AuditLogResponse,
)
from .services import AdminEarningsService, EXPORT_TYPES, balance_view

logger = logging.getLogger(__name__)

router = APIRouter()

def _admin_username(current_admin: Dict[str, Any]) -> str:
    return current_admin.get("username") or current_admin["id"]

@router.post(
    "/login",
    response_model=AdminLoginResponse,
    summary="Admin login",
    description="Exchange the configured admin credentials for an admin token"
)
@admin_login_limit
async def admin_login(request: Request, login_data: AdminLogin):
    """Admin login"""
    if not SecurityUtils.authenticate_admin(login_data.username, login_data.password):
        logger.warning(f"Failed admin login for '{login_data.username}'")
        raise UnauthorizedException("Invalid admin credentials", error_code="INVALID_CREDENTIALS")

    logger.info(f"Admin {login_data.username} logged in")
    return AdminLoginResponse(
        admin_token=SecurityUtils.create_admin_token(login_data.username),
        admin=AdminOut(username=login_data.username)
    )

@router.get("/earnings/all-users", response_model=AdminUsersResponse)
async def get_all_users(
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Every user with earnings, withdrawn and balance figures"""
    service = AdminEarningsService(db, referral_db)
    return AdminUsersResponse(users=await service.users_with_balances())

@router.get("/earnings/user/{user_id}", response_model=AdminUserDetailResponse)
async def get_user_earnings(
    user_id: str,
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Full earnings picture for one user"""
    service = AdminEarningsService(db, referral_db)
    detail = await service.user_detail(user_id)
    detail["user"] = UserOut.model_validate(detail["user"])
    return AdminUserDetailResponse.model_validate(detail)

@router.get("/earnings/withdrawals", response_model=AdminWithdrawalsResponse)
async def get_all_withdrawals(
    status: Optional[WithdrawalStatus] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All withdrawals, newest first"""
    service = WithdrawalService(db)
    withdrawals = await service.list_all(status=status.value if status else None, user_id=user_id)
    return AdminWithdrawalsResponse(withdrawals=withdrawals)

@router.put(
    "/earnings/approve-withdrawal/{withdrawal_id}",
    response_model=WithdrawalResolvedResponse,
    summary="Resolve withdrawal",
    description="Approve or reject a pending withdrawal; resolution is final"
)
async def resolve_withdrawal(
    withdrawal_id: uuid.UUID,
    resolve_data: WithdrawalResolve,
    request: Request,
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Approve or reject withdrawal"""
    service = WithdrawalService(db)
    withdrawal = await service.resolve(
        withdrawal_id=withdrawal_id,
        new_status=resolve_data.status,
        admin_username=_admin_username(current_admin),
        admin_notes=resolve_data.admin_notes,
        rejection_reason=resolve_data.rejection_reason,
        request=request
    )
    return WithdrawalResolvedResponse(withdrawal=withdrawal)

@router.post("/earnings/adjust-earnings", response_model=AdjustmentCreatedResponse)
async def adjust_earnings(
    adjustment_data: EarningsAdjustmentCreate,
    request: Request,
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Credit or debit a user's earnings"""
    service = AdminEarningsService(db, referral_db)
    adjustment, balance = await service.adjust_earnings(
        user_id=adjustment_data.user_id,
        amount=adjustment_data.adjustment_amount,
        adjustment_type=adjustment_data.adjustment_type,
        reason=adjustment_data.reason,
        admin_username=_admin_username(current_admin),
        username=adjustment_data.username,
        request=request
    )
    return AdjustmentCreatedResponse(
        message="Earnings adjusted successfully",
        adjustment=adjustment,
        balance=balance_view(balance)
    )

@router.put("/earnings/referral-status/{referral_id}", response_model=ReferralStatusResponse)
async def update_referral_status(
    referral_id: uuid.UUID,
    status_data: ReferralStatusUpdate,
    request: Request,
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Approve or reject a pending referral"""
    service = AdminEarningsService(db, referral_db)
    referral = await service.update_referral_status(
        referral_id=referral_id,
        new_status=status_data.status,
        admin_username=_admin_username(current_admin),
        request=request
    )
    return ReferralStatusResponse(referral=referral)

@router.post("/earnings/set-winners", response_model=SetWinnersResponse)
async def set_winners(
    winners_data: SetWinners,
    request: Request,
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Set this week's winners"""
    service = WinnersService(db, referral_db)
    result = await service.set_winners(
        winner_ids=[winners_data.winner1, winners_data.winner2],
        admin_username=_admin_username(current_admin),
        message=winners_data.message,
        request=request
    )
    return SetWinnersResponse(
        week_start=result.week_start,
        week_end=result.week_end,
        winners=result.winners
    )

@router.get(
    "/earnings/export",
    summary="Export CSV",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}}
)
async def export_csv(
    export_type: str = Query(..., alias="type", description=", ".join(EXPORT_TYPES)),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    referral_db: AsyncSession = Depends(get_referral_db)
):
    """Download earnings data as CSV"""
    service = AdminEarningsService(db, referral_db)
    records, fieldnames = await service.export_records(export_type, user_id)
    try:
        content = to_csv(records, fieldnames)
    except NoDataError as e:
        raise NotFoundException(str(e), error_code="NO_DATA")

    filename = f"earnings_{export_type}_{utc_now().date().isoformat()}.csv"
    logger.info(f"Admin {_admin_username(current_admin)} exported {len(records)} {export_type} rows")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@router.get("/earnings/audit-log", response_model=AuditLogResponse)
async def get_audit_log(
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Admin actions, newest first"""
    service = AuditService(db)
    logs = await service.get_admin_logs(
        entity_type=entity_type,
        entity_id=entity_id,
        limit=limit,
        offset=offset
    )
    return AuditLogResponse(logs=logs)
