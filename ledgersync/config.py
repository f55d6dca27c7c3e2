"""
Configuration module for the ledger sync service.

Loads environment variables and validates required settings.
"""
import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")

    # Session of the single active client. Both empty means the client runs
    # unauthenticated and remote sync is skipped.
    SUPABASE_ACCESS_TOKEN: str = os.getenv("SUPABASE_ACCESS_TOKEN", "")
    SUPABASE_REFRESH_TOKEN: str = os.getenv("SUPABASE_REFRESH_TOKEN", "")

    # Local persistent store (empty = in-memory only)
    LOCAL_STORE_PATH: str = os.getenv("LOCAL_STORE_PATH", "")

    # Number of recent sync events kept for the UI
    ACTIVITY_LOG_SIZE: int = int(os.getenv("ACTIVITY_LOG_SIZE", "100"))

    # HTTP surface for the local UI
    SYNC_HOST: str = os.getenv("SYNC_HOST", "127.0.0.1")
    SYNC_PORT: int = int(os.getenv("SYNC_PORT", "8765"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def has_session(self) -> bool:
        """Whether a session token was configured for the remote store."""
        return bool(self.SUPABASE_ACCESS_TOKEN)

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "SUPABASE_URL": cls.SUPABASE_URL,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_staging(cls) -> bool:
        """Check if running in staging environment."""
        return cls.ENVIRONMENT.lower() == "staging"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


settings = Settings()

# Fail fast on misconfiguration, except during tests or introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   Remote sync will not work until you configure your .env file.")
        else:
            raise
