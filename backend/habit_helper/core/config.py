"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables"""

    # Store
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
    STORE_TIMEOUT_SECONDS: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "120"))
    REALTIME_ENABLED: bool = _get_bool("REALTIME_ENABLED", False)

    # AI coach
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")

    # Push notifications
    VAPID_PUBLIC_KEY: str = os.getenv("VAPID_PUBLIC_KEY", "")

    # Local calendar
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "Asia/Seoul")

    # Polling and sessions
    STATUS_REFRESH_INTERVAL_SECONDS: int = int(os.getenv("STATUS_REFRESH_INTERVAL_SECONDS", "30"))
    SESSION_TIMEOUT_MINUTES: int = int(os.getenv("SESSION_TIMEOUT_MINUTES", "60"))


# Create a global settings instance
settings = Settings()
