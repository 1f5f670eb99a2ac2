from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    receipt_prefix: str = Field("RCP", alias="RECEIPT_PREFIX")

    # School-wide late fee defaults; a quarter's own policy columns take precedence.
    late_fee_type: str = Field("flat", alias="LATE_FEE_TYPE")
    late_fee_amount: Decimal = Field(Decimal("100"), alias="LATE_FEE_AMOUNT")
    late_fee_percentage: Decimal = Field(Decimal("5"), alias="LATE_FEE_PERCENTAGE")
    late_fee_grace_period_days: int = Field(7, alias="LATE_FEE_GRACE_PERIOD_DAYS")
    late_fee_apply_daily: bool = Field(False, alias="LATE_FEE_APPLY_DAILY")
    late_fee_max: Optional[Decimal] = Field(Decimal("1000"), alias="LATE_FEE_MAX")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
