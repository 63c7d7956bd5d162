from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from .env or the environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./registrations.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_APP_NAME: str = "event_registration"
    LOG_LEVEL: str = "INFO"

    # Registration ledger
    REGISTRATION_MAX_RETRIES: int = 3
    REGISTRATION_RETRY_BACKOFF: float = 0.05
    LOCK_TIMEOUT: int = 10
    LOCK_BLOCKING_TIMEOUT: int = 5


settings = Settings()
