"""
Settings shared by the API, the maintenance job and the import script.

Values come from environment variables or a .env file via
pydantic-settings; the application subclass adds campaign options.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        SMTP_HOST: str = ""

    settings = Settings()
    print(settings.MONGODB_URI)
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """
    Database, token signing, server and CORS options.
    """

    # ==========================================================================
    # Database Settings
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "nhc"

    # ==========================================================================
    # Authentication Settings
    # ==========================================================================
    # HS256 signs with JWT_SECRET; RS256 signs with the private key file and
    # verifies with the public key file.
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_PRIVATE_KEY_PATH: Optional[str] = None
    JWT_PUBLIC_KEY_PATH: Optional[str] = None
    JWT_ACCESS_TOKEN_EXPIRE_DAYS: int = 14

    # ==========================================================================
    # Server Settings
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # CORS Settings
    CORS_ORIGINS: str = "*"  # Comma-separated origins or "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    # ==========================================================================
    # Pydantic Settings Configuration
    # ==========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",  # Allow app-specific settings
        case_sensitive=True,
    )

    def get_cors_origins(self) -> list:
        """Parse CORS_ORIGINS into a list."""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"

    def uses_key_pair(self) -> bool:
        """Check if tokens are signed with an asymmetric key pair."""
        return self.JWT_ALGORITHM.upper().startswith(("RS", "ES"))

    def validate_required(self) -> None:
        """
        Validate that required settings are configured.

        Raises:
            ValueError: If required settings are missing
        """
        errors = []

        if self.uses_key_pair():
            if not self.JWT_PRIVATE_KEY_PATH or not self.JWT_PUBLIC_KEY_PATH:
                errors.append(
                    f"JWT_PRIVATE_KEY_PATH and JWT_PUBLIC_KEY_PATH are required for {self.JWT_ALGORITHM}"
                )
        elif not self.JWT_SECRET:
            errors.append("JWT_SECRET is required when using JWT authentication")

        if errors:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(errors))
