"""
Application configuration management using Pydantic Settings
Handles all environment variables and application settings
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from decimal import Decimal
from functools import lru_cache

class Settings(BaseSettings):
    """Main application settings"""

    # Application Settings
    APP_NAME: str = "Earnings API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    WORKERS: int = 4

    # Earnings store
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_ECHO: bool = False

    # Referral store (users, referral links, referrals); falls back to DATABASE_URL
    REFERRAL_DATABASE_URL: Optional[str] = None

    # Security Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60 * 8

    # Admin credential
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD_HASH: Optional[str] = None

    # CORS Configuration
    ALLOWED_HOSTS: List[str] = ["*"]
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Business Logic Settings
    REWARD_PER_REFERRAL: Decimal = Decimal("100")
    SUPPORTED_OPERATORS: List[str] = ["Airtel", "Vi", "Jio"]
    CURRENCY_SYMBOL: str = "₹"

    # Winners of the week
    WINNERS_TIMEZONE: str = "Asia/Kolkata"
    WINNERS_PER_WEEK: int = 2
    LEADERBOARD_WINDOW_DAYS: int = 7
    LEADERBOARD_SIZE: int = 10

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_DEFAULT: str = "1000/hour"
    RATE_LIMIT_ADMIN_LOGIN: str = "5/minute"

    # Monitoring
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True

    @staticmethod
    def _to_async_url(url: str) -> str:
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @property
    def database_url_async(self) -> str:
        """Convert sync database URL to async"""
        return self._to_async_url(self.DATABASE_URL)

    @property
    def referral_database_url_async(self) -> Optional[str]:
        if not self.REFERRAL_DATABASE_URL:
            return None
        return self._to_async_url(self.REFERRAL_DATABASE_URL)

    @property
    def has_separate_referral_store(self) -> bool:
        return bool(self.REFERRAL_DATABASE_URL) and self.REFERRAL_DATABASE_URL != self.DATABASE_URL

@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance
    This ensures settings are loaded only once
    """
    return Settings()

# Global settings instance
settings = get_settings()
