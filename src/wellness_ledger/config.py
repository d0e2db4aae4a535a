"""
Central configuration module for the Wellness Minutes Ledger
Reads and validates environment variables with strict checks for production
"""
import os
import sys
from typing import Optional

from dotenv import load_dotenv

# .env is only honoured in local development
if os.getenv("ENV", "dev").lower() == "dev":
    load_dotenv()


class Config:
    """Central configuration class with environment variable validation"""

    # Environment
    ENV: str = os.getenv("ENV", "dev").lower()

    # Database - SQLite is accepted for dev/test only
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wellness_ledger.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "900"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Minutes accounting
    LOW_MINUTES_THRESHOLD: float = float(os.getenv("LOW_MINUTES_THRESHOLD", "0.80"))

    # Notifications
    PAYOUT_ADMIN_EMAIL: str = os.getenv("PAYOUT_ADMIN_EMAIL", "info@hollyaid.com")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "HollyAid <noreply@hollyaid.com>")
    DASHBOARD_URL: str = os.getenv("DASHBOARD_URL", "https://hollyaid.com/dashboard")
    SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: Optional[str] = os.getenv("SMTP_USER")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT: int = int(os.getenv("SMTP_TIMEOUT", "10"))

    # Build version (set during build/deploy)
    BUILD_VERSION: str = os.getenv("BUILD_VERSION", "dev")

    def __init__(self):
        """Initialize configuration and validate required variables"""
        self._validate()

    def _validate(self):
        """Validate required configuration based on environment"""
        errors = []

        if self.ENV not in ["dev", "test", "staging", "prod"]:
            errors.append(f"Invalid ENV value: {self.ENV}. Must be 'dev', 'test', 'staging', or 'prod'")

        if not self.DATABASE_URL:
            errors.append("DATABASE_URL is required but not set")
        elif self.ENV in ["staging", "prod"] and not self.DATABASE_URL.startswith("postgresql"):
            errors.append(f"DATABASE_URL must be a PostgreSQL connection string in {self.ENV} (got: {self.DATABASE_URL[:30]}...)")

        if not 0 < self.LOW_MINUTES_THRESHOLD <= 1:
            errors.append(f"LOW_MINUTES_THRESHOLD must be in (0, 1] (got: {self.LOW_MINUTES_THRESHOLD})")

        if self.ENV in ["staging", "prod"] and not self.SMTP_HOST:
            errors.append("SMTP_HOST is required in staging/production")

        if errors:
            self._report(errors, fatal=self.ENV in ["staging", "prod"])

    @staticmethod
    def _report(errors, fatal: bool):
        """Print configuration problems; exit when they are fatal"""
        heading = "CONFIGURATION INVALID, refusing to start" if fatal else "Configuration warnings (continuing)"
        lines = [heading] + [f"  - {error}" for error in errors]
        print("\n".join(lines), file=sys.stderr)
        if fatal:
            sys.exit(1)

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode"""
        return self.ENV == "dev"

    @property
    def smtp_configured(self) -> bool:
        """SMTP needs a host; credentials are optional for relays"""
        return bool(self.SMTP_HOST)

    def get_database_url(self) -> str:
        """Get database URL (alias for DATABASE_URL)"""
        return self.DATABASE_URL


# Create global config instance
config = Config()
