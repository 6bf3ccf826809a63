import logging
import os
from functools import lru_cache

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def _load_doppler_secrets():
    """Load secrets from Doppler API into environment variables.

    Must run BEFORE Settings is instantiated so pydantic can read the env vars.
    """
    token = os.getenv("DOPPLER_TOKEN")
    if not token:
        return

    try:
        import requests
        response = requests.get(
            "https://api.doppler.com/v3/configs/config/secrets/download",
            params={"format": "json"},
            auth=(token, ""),
            timeout=30,
        )
        response.raise_for_status()
        secrets = response.json()

        for key, value in secrets.items():
            if key not in os.environ:  # env vars set explicitly win
                os.environ[key] = value

        logger.info(f"Loaded {len(secrets)} secrets from Doppler")
    except Exception as e:
        logger.warning(f"Failed to load Doppler secrets: {e}")


_load_doppler_secrets()


class Settings(BaseSettings):
    environment: str = "development"

    # Supabase
    supabase_url: str = ""
    supabase_secret_key: str = ""

    # Wallet services (remote pass issuers)
    apple_wallet_api_url: str = ""
    google_wallet_api_url: str = ""
    google_wallet_class_id: str = ""
    wallet_timeout_seconds: float = 10.0

    # Accrual
    accrual_max_commit_attempts: int = 5

    # Public web app (hosts the enrollment form)
    web_app_url: str = "http://localhost:8081"

    # CORS: origins allowed in production
    cors_origin_pattern: str = r"^https://([a-z0-9-]+\.)?example\.com$"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def get_enrollment_link(business_id: str) -> str:
    """
    Get the public enrollment URL for a business.

    The web app resolves the business from the last path segment and
    pre-fills which business the new customer registers under.
    """
    return f"{settings.web_app_url.rstrip('/')}/register/{business_id}"
