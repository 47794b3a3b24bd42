"""
Nutrition Habit Challenge application settings.

Extends the base settings with campaign-specific configuration.
"""

from pathlib import Path
from typing import Optional
from common.config import BaseAppSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseAppSettings):
    """NHC-specific settings."""

    CORS_ORIGINS: str = (
        "http://localhost:8081,"
        "https://nutritionhabitchallenge.com,"
        "https://www.nutritionhabitchallenge.com"
    )

    # ==========================================================================
    # OAuth Providers
    # ==========================================================================
    FACEBOOK_CLIENT_SECRET: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    OAUTH_TIMEOUT_SECONDS: float = 5.0

    # ==========================================================================
    # Email Settings (verification, password reset, announcements)
    # ==========================================================================
    EMAIL_MODE: str = "console"  # console or smtp
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "info@nutritionhabitchallenge.com"
    SMTP_FROM_NAME: str = "Nutrition Habit Challenge"

    # ==========================================================================
    # Notification Dispatcher
    # ==========================================================================
    MAIL_QUEUE_SIZE: int = 500
    MAIL_WORKERS: int = 2
    BULK_MAIL_DELAY_SECONDS: float = 0.25

    # ==========================================================================
    # Site URL (for email links)
    # ==========================================================================
    SITE_URL: str = "https://www.nutritionhabitchallenge.com"

    # ==========================================================================
    # Moderation
    # ==========================================================================
    PROFANITY_WORDS: str = ""  # Comma-separated, extends the built-in list
    PROFANITY_API_URL: Optional[str] = None  # e.g. https://host/profanity?q=
    PROFANITY_TIMEOUT_SECONDS: float = 3.0

    # ==========================================================================
    # Seed Data
    # ==========================================================================
    ORGANIZATIONS_SEED_FILE: str = str(PROJECT_ROOT / "data" / "organizations.json")
    COMMITMENTS_SEED_FILE: str = str(PROJECT_ROOT / "data" / "commitments.json")

    def get_profanity_words(self) -> list:
        """Parse PROFANITY_WORDS into a list."""
        return [w.strip().lower() for w in self.PROFANITY_WORDS.split(",") if w.strip()]

    def smtp_configured(self) -> bool:
        """Check if real e-mail delivery is configured."""
        return self.EMAIL_MODE == "smtp" and bool(self.SMTP_HOST)

    def read_jwt_keys(self) -> tuple:
        """
        Resolve the JWT signing and verification keys.

        Returns:
            (signing_key, verify_key) - identical for symmetric algorithms
        """
        if self.uses_key_pair():
            private_key = Path(self.JWT_PRIVATE_KEY_PATH).read_text()
            public_key = Path(self.JWT_PUBLIC_KEY_PATH).read_text()
            return private_key, public_key
        return self.JWT_SECRET, self.JWT_SECRET


# Global settings instance
settings = Settings()
