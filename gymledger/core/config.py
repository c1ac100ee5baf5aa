from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Used when no fixed_values row exists yet
    default_revenue_per_student: Decimal = Field(Decimal("28.00"), alias="DEFAULT_REVENUE_PER_STUDENT")
    default_fixed_cost_per_class: Decimal = Field(Decimal("78.00"), alias="DEFAULT_FIXED_COST_PER_CLASS")

    series_batch_size: int = Field(3, alias="SERIES_BATCH_SIZE")
    series_batch_pause_seconds: float = Field(0.5, alias="SERIES_BATCH_PAUSE_SECONDS")

    password_reset_token_hours: int = Field(24, alias="PASSWORD_RESET_TOKEN_HOURS")
    password_reset_url: str = Field("http://localhost:5000/reset-password", alias="PASSWORD_RESET_URL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    admin_email: Optional[str] = Field(None, alias="ADMIN_EMAIL")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
