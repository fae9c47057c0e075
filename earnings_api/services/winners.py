"""
Winners of the week

Admin-curated winners for the current Sunday-Saturday week take precedence.
Without them, the public endpoint ranks users by approved-referral earnings
over a rolling window.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request
import logging

from earnings_api.core.config import settings
from earnings_api.core.exceptions import ValidationException, NotFoundException
from earnings_api.models import User, ReferralLink, Referral, ReferralStatus, WinnerOfWeek
from earnings_api.utils.helpers import quantize_amount, to_decimal, utc_now, week_window
from .audit_service import AuditService
from .balance import BalanceService

logger = logging.getLogger(__name__)

SOURCE_CURATED = "curated"
SOURCE_LEADERBOARD = "leaderboard"

@dataclass
class WinnersResult:
    source: str
    week_start: date
    week_end: date
    winners: List[Dict[str, Any]] = field(default_factory=list)

def current_week_window(now: Optional[datetime] = None) -> Tuple[date, date]:
    """Sunday-Saturday window in the configured timezone"""
    return week_window(now, settings.WINNERS_TIMEZONE)

class WinnersService:
    """Curated and computed weekly winners"""

    def __init__(self, db: AsyncSession, referral_db: Optional[AsyncSession] = None):
        self.db = db
        self.referral_db = referral_db or db
        self.balance_service = BalanceService(db, self.referral_db)
        self.audit_service = AuditService(db)

    async def _users_by_id(self, user_ids: Sequence[str]) -> Dict[str, User]:
        if not user_ids:
            return {}
        result = await self.referral_db.execute(select(User).where(User.id.in_(list(user_ids))))
        return {user.id: user for user in result.scalars()}

    async def curated_winners(self, week_start: date) -> List[WinnerOfWeek]:
        result = await self.db.execute(
            select(WinnerOfWeek)
            .where(WinnerOfWeek.week_start == week_start)
            .order_by(WinnerOfWeek.position)
        )
        return list(result.scalars().all())

    async def leaderboard(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Top earners from referrals approved within the rolling window"""
        now = now or utc_now()
        since = now - timedelta(days=settings.LEADERBOARD_WINDOW_DAYS)
        reward = to_decimal(settings.REWARD_PER_REFERRAL)

        approved = func.count(Referral.id).label("approved")
        result = await self.referral_db.execute(
            select(User.id, User.email, User.display_name, approved)
            .select_from(User)
            .join(ReferralLink, ReferralLink.user_id == User.id)
            .join(Referral, Referral.referral_link_id == ReferralLink.id)
            .where(
                Referral.status == ReferralStatus.APPROVED.value,
                Referral.created_at >= since,
            )
            .group_by(User.id, User.email, User.display_name)
            .having(func.count(Referral.id) > 0)
            .order_by(approved.desc(), User.id)
            .limit(settings.LEADERBOARD_SIZE)
        )

        return [
            {
                "position": position,
                "user_id": row.id,
                "email": row.email,
                "display_name": row.display_name,
                "total_earnings": quantize_amount(reward * int(row.approved)),
                "message": None,
            }
            for position, row in enumerate(result, start=1)
        ]

    async def get_winners(self, now: Optional[datetime] = None) -> WinnersResult:
        week_start, week_end = current_week_window(now)
        curated = await self.curated_winners(week_start)

        if not curated:
            return WinnersResult(
                source=SOURCE_LEADERBOARD,
                week_start=week_start,
                week_end=week_end,
                winners=await self.leaderboard(now),
            )

        users = await self._users_by_id([winner.user_id for winner in curated])
        return WinnersResult(
            source=SOURCE_CURATED,
            week_start=week_start,
            week_end=week_end,
            winners=[self._curated_row(winner, users.get(winner.user_id)) for winner in curated],
        )

    @staticmethod
    def _curated_row(winner: WinnerOfWeek, user: Optional[User]) -> Dict[str, Any]:
        return {
            "position": winner.position,
            "user_id": winner.user_id,
            "email": user.email if user else None,
            "display_name": user.display_name if user else None,
            "total_earnings": quantize_amount(winner.total_earnings),
            "message": winner.message,
        }

    async def set_winners(
        self,
        winner_ids: Sequence[str],
        admin_username: str,
        message: Optional[str] = None,
        now: Optional[datetime] = None,
        request: Optional[Request] = None
    ) -> WinnersResult:
        """
        Replace the current week's curated winners

        Raises:
            ValidationException: Wrong count or duplicate users
            NotFoundException: A winner is not a known user
        """
        if len(winner_ids) != settings.WINNERS_PER_WEEK:
            raise ValidationException(f"Exactly {settings.WINNERS_PER_WEEK} winners are required")
        if len(set(winner_ids)) != len(winner_ids):
            raise ValidationException("Winners must be different users")

        users = await self._users_by_id(winner_ids)
        missing = [user_id for user_id in winner_ids if user_id not in users]
        if missing:
            raise NotFoundException(f"User not found: {', '.join(missing)}")

        week_start, week_end = current_week_window(now)
        previous = [winner.user_id for winner in await self.curated_winners(week_start)]

        await self.db.execute(delete(WinnerOfWeek).where(WinnerOfWeek.week_start == week_start))

        for position, user_id in enumerate(winner_ids, start=1):
            balance = await self.balance_service.compute(user_id)
            self.db.add(WinnerOfWeek(
                user_id=user_id,
                position=position,
                total_earnings=balance.lifetime_earnings,
                message=message,
                week_start=week_start,
                week_end=week_end,
            ))

        await self.audit_service.log_admin_action(
            admin_username=admin_username,
            action="set_winners",
            entity_type="winners",
            entity_id=week_start.isoformat(),
            description=f"Winners for week {week_start.isoformat()} - {week_end.isoformat()}",
            old_values={"winners": previous},
            new_values={"winners": list(winner_ids), "message": message},
            request=request,
        )
        logger.info(f"Winners for week starting {week_start} set by {admin_username}: {list(winner_ids)}")

        curated = await self.curated_winners(week_start)
        return WinnersResult(
            source=SOURCE_CURATED,
            week_start=week_start,
            week_end=week_end,
            winners=[self._curated_row(winner, users.get(winner.user_id)) for winner in curated],
        )
