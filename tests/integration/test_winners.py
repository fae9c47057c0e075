"""Integration tests for weekly winners."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from earnings_api.models import Referral, ReferralStatus
from earnings_api.services.winners import WinnersService
from conftest import seed_referrals, seed_user


class TestWinnersOfWeek:

    @pytest.mark.asyncio
    async def test_leaderboard_without_curated_winners(self, client, db_session):
        await seed_user(db_session, "user-1")
        await seed_user(db_session, "user-2")
        await seed_user(db_session, "user-3")
        await seed_referrals(db_session, "user-1", "Airtel", approved=1)
        await seed_referrals(db_session, "user-2", "Jio", approved=3)
        await seed_referrals(db_session, "user-3", "Vi", pending=4)

        response = await client.get("/api/earnings/winners-of-week")

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "leaderboard"
        assert [w["user_id"] for w in body["winners"]] == ["user-2", "user-1"]
        assert body["winners"][0]["position"] == 1
        assert body["winners"][0]["total_earnings"] == "300.00"

    @pytest.mark.asyncio
    async def test_leaderboard_ignores_old_referrals(self, db_session):
        await seed_user(db_session, "user-1")
        link = await seed_referrals(db_session, "user-1", "Airtel")
        db_session.add(Referral(
            referral_link_id=link.id,
            referred_name="old lead",
            status=ReferralStatus.APPROVED.value,
            created_at=datetime.now(timezone.utc) - timedelta(days=30),
        ))
        await db_session.commit()

        assert await WinnersService(db_session).leaderboard() == []

    @pytest.mark.asyncio
    async def test_set_winners_then_read(self, client, db_session, admin_headers):
        await seed_user(db_session, "user-1", email="one@example.com")
        await seed_user(db_session, "user-2")
        await seed_referrals(db_session, "user-1", "Airtel", approved=2)

        response = await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-2", "winner2": "user-1", "message": "Congrats!"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert [w["user_id"] for w in body["winners"]] == ["user-2", "user-1"]
        assert body["winners"][1]["total_earnings"] == "200.00"
        assert body["weekStart"] <= body["weekEnd"]

        public = await client.get("/api/earnings/winners-of-week")
        assert public.json()["source"] == "curated"
        assert public.json()["winners"][1]["email"] == "one@example.com"
        assert public.json()["winners"][0]["message"] == "Congrats!"

    @pytest.mark.asyncio
    async def test_set_winners_replaces_current_week(self, client, db_session, admin_headers):
        for user_id in ("user-1", "user-2", "user-3"):
            await seed_user(db_session, user_id)

        await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-1", "winner2": "user-2"},
            headers=admin_headers,
        )
        await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-3", "winner2": "user-1"},
            headers=admin_headers,
        )

        public = await client.get("/api/earnings/winners-of-week")
        assert [w["user_id"] for w in public.json()["winners"]] == ["user-3", "user-1"]

    @pytest.mark.asyncio
    async def test_same_user_twice(self, client, db_session, admin_headers):
        await seed_user(db_session, "user-1")

        response = await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-1", "winner2": "user-1"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_winner(self, client, db_session, admin_headers):
        await seed_user(db_session, "user-1")

        response = await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-1", "winner2": "ghost"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_set_winners_requires_admin(self, client, db_session, user_headers):
        response = await client.post(
            "/api/admin/earnings/set-winners",
            json={"winner1": "user-1", "winner2": "user-2"},
            headers=user_headers("user-1"),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_curated_rows_belong_to_their_week(self, db_session):
        await seed_user(db_session, "user-1")
        await seed_user(db_session, "user-2")
        service = WinnersService(db_session)
        last_week = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)
        this_week = datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)

        await service.set_winners(["user-1", "user-2"], admin_username="admin", now=last_week)
        await db_session.commit()

        result = await service.get_winners(now=this_week)
        assert result.source == "leaderboard"
        assert result.week_start.isoformat() == "2026-10-18"

        previous = await service.get_winners(now=last_week)
        assert previous.source == "curated"
        assert previous.winners[0]["total_earnings"] == Decimal("0.00")
