"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
import tempfile
from pathlib import Path

from passlib.context import CryptContext

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-test-password"

# Settings are read once at import, so the environment goes first
_db_dir = tempfile.mkdtemp(prefix="earnings-api-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_db_dir}/earnings.db")
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ADMIN_USERNAME", ADMIN_USERNAME)
os.environ.setdefault(
    "ADMIN_PASSWORD_HASH",
    CryptContext(schemes=["bcrypt"], deprecated="auto").hash(ADMIN_PASSWORD),
)

# Project root on the path for run_app
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
import pytest_asyncio
from typing import Optional
from httpx import ASGITransport, AsyncClient

from earnings_api.core.database import engine, AsyncSessionLocal
from earnings_api.core.security import SecurityUtils
from earnings_api.main import app
from earnings_api.models import Base, User, ReferralLink, Referral, ReferralStatus


@pytest_asyncio.fixture
async def setup_db():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(setup_db):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(setup_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def seed_user(
    session,
    user_id: str,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
) -> User:
    user = User(
        id=user_id,
        email=email or f"{user_id}@example.com",
        display_name=display_name or user_id.title(),
    )
    session.add(user)
    await session.commit()
    return user


async def seed_referrals(
    session,
    user_id: str,
    operator: str = "Airtel",
    approved: int = 0,
    pending: int = 0,
    rejected: int = 0,
    code: Optional[str] = None,
) -> ReferralLink:
    """One referral link for ``user_id`` with referrals in the given states."""
    link = ReferralLink(
        user_id=user_id,
        operator=operator,
        referral_code=code or f"{user_id}-{operator}".upper(),
    )
    session.add(link)
    await session.flush()

    counts = [
        (ReferralStatus.APPROVED, approved),
        (ReferralStatus.PENDING, pending),
        (ReferralStatus.REJECTED, rejected),
    ]
    for status, count in counts:
        for i in range(count):
            session.add(Referral(
                referral_link_id=link.id,
                referred_name=f"{status.value} lead {i + 1}",
                status=status.value,
            ))
    await session.commit()
    return link


def user_token(user_id: str, email: Optional[str] = None) -> str:
    return SecurityUtils.create_access_token({
        "sub": user_id,
        "role": "user",
        "email": email or f"{user_id}@example.com",
    })


def admin_token() -> str:
    return SecurityUtils.create_admin_token(ADMIN_USERNAME)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    """Bearer headers for a user id."""
    def _headers(user_id: str) -> dict:
        return auth_header(user_token(user_id))
    return _headers


@pytest.fixture
def admin_headers():
    return auth_header(admin_token())
