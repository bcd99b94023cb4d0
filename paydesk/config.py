from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./paydesk.db"

    # --- Sessions ---
    SESSION_SECRET: str
    SESSION_COOKIE_NAME: str = "paydesk_session"
    SESSION_MAX_AGE: int = 14 * 24 * 3600
    SESSION_HTTPS_ONLY: bool = False

    # --- Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # --- Credentials ---
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 10

    # --- Outbound email ---
    EMAIL: str = ""
    EMAIL_PASSWORD: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_TIMEOUT: float = 10.0

    # --- Paystack ---
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_TIMEOUT: float = 10.0

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    @field_validator("SESSION_SECRET")
    @classmethod
    def _secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SESSION_SECRET must not be empty")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _rounds_in_range(cls, v: int) -> int:
        # bcrypt accepts log2 rounds in [4, 31]
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
