"""Integration tests for the user-facing earnings endpoints."""

import pytest

from earnings_api.models import ReferralStatus
from conftest import admin_token, auth_header, seed_referrals, seed_user, user_token


class TestHealth:

    @pytest.mark.asyncio
    async def test_database_round_trip(self, client):
        response = await client.get("/api/test")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Database connected!"
        assert body["time"]

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_unknown_route_envelope(self, client):
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Endpoint not found",
            "path": "/api/nothing-here",
        }

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestValidateToken:

    @pytest.mark.asyncio
    async def test_token_in_body(self, client, db_session):
        await seed_user(db_session, "user-1", email="one@example.com")

        response = await client.post(
            "/api/earnings/validate-token",
            json={"token": user_token("user-1"), "uid": "user-1"},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == "user-1"
        assert user["email"] == "one@example.com"
        assert "displayName" in user

    @pytest.mark.asyncio
    async def test_bearer_token(self, client, db_session):
        await seed_user(db_session, "user-1")

        response = await client.post(
            "/api/earnings/validate-token",
            json={},
            headers=auth_header(user_token("user-1")),
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.post("/api/earnings/validate-token", json={})

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        response = await client.post("/api/earnings/validate-token", json={"token": user_token("ghost")})

        assert response.status_code == 401
        assert response.json()["error"] == "User not found"

    @pytest.mark.asyncio
    async def test_uid_mismatch(self, client, db_session):
        await seed_user(db_session, "user-1")

        response = await client.post(
            "/api/earnings/validate-token",
            json={"token": user_token("user-1"), "uid": "user-2"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_token_rejected(self, client):
        response = await client.post("/api/earnings/validate-token", json={"token": admin_token()})
        assert response.status_code == 403


class TestDashboard:

    @pytest.mark.asyncio
    async def test_three_approved_airtel_referrals(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_referrals(db_session, "user-1", "Airtel", approved=3, pending=1)

        response = await client.get("/api/earnings/dashboard/user-1", headers=user_headers("user-1"))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalEarnings"] == "300.00"
        assert body["currentBalance"] == "300.00"
        assert body["totalWithdrawn"] == "0.00"
        assert body["userEarnings"] == [{
            "operator": "Airtel",
            "total_referrals": 4,
            "approved_referrals_count": 3,
            "total_amount": "300.00",
        }]

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_referrals(db_session, "user-1", "Vi", approved=2)
        headers = user_headers("user-1")

        first = await client.get("/api/earnings/dashboard/user-1", headers=headers)
        second = await client.get("/api/earnings/dashboard/user-1", headers=headers)

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/earnings/dashboard/user-1")

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_other_users_earnings_forbidden(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_user(db_session, "user-2")

        response = await client.get("/api/earnings/dashboard/user-2", headers=user_headers("user-1"))

        assert response.status_code == 403
        assert response.json()["error"] == "You can only access your own earnings"

    @pytest.mark.asyncio
    async def test_admin_may_read_any_dashboard(self, client, db_session, admin_headers):
        await seed_user(db_session, "user-2")

        response = await client.get("/api/earnings/dashboard/user-2", headers=admin_headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get(
            "/api/earnings/dashboard/user-1",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401


class TestHistoryAndLinks:

    @pytest.mark.asyncio
    async def test_history_amounts(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_referrals(db_session, "user-1", "Airtel", approved=1, rejected=1)

        response = await client.get("/api/earnings/history/user-1", headers=user_headers("user-1"))

        assert response.status_code == 200
        history = response.json()["earningsHistory"]
        assert len(history) == 2
        earned = {row["status"]: row["amount_earned"] for row in history}
        assert earned[ReferralStatus.APPROVED.value] == "100.00"
        assert earned[ReferralStatus.REJECTED.value] == "0.00"
        assert {"id", "operator", "referred_person_name", "created_at"} <= set(history[0])

    @pytest.mark.asyncio
    async def test_history_operator_filter(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_referrals(db_session, "user-1", "Airtel", approved=2)
        await seed_referrals(db_session, "user-1", "Jio", approved=1)

        response = await client.get(
            "/api/earnings/history/user-1",
            params={"operator": "jio"},
            headers=user_headers("user-1"),
        )

        history = response.json()["earningsHistory"]
        assert len(history) == 1
        assert history[0]["operator"] == "Jio"

    @pytest.mark.asyncio
    async def test_history_unknown_operator(self, client, db_session, user_headers):
        response = await client.get(
            "/api/earnings/history/user-1",
            params={"operator": "BSNL"},
            headers=user_headers("user-1"),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_referral_links(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")
        await seed_referrals(db_session, "user-1", "Airtel", code="AIR-001")

        response = await client.get("/api/earnings/referral-links/user-1", headers=user_headers("user-1"))

        links = response.json()["referralLinks"]
        assert len(links) == 1
        assert links[0]["operator"] == "Airtel"
        assert links[0]["referral_code"] == "AIR-001"

    @pytest.mark.asyncio
    async def test_empty_withdrawals(self, client, db_session, user_headers):
        await seed_user(db_session, "user-1")

        response = await client.get("/api/earnings/withdrawals/user-1", headers=user_headers("user-1"))

        assert response.json() == {"success": True, "withdrawals": []}


class TestMetrics:

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, client):
        await client.get("/health")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
