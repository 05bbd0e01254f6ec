from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from billsplit.models import ServiceFeeMode


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    default_service_fee_percentage: float = Field(10.0, ge=0, alias="DEFAULT_SERVICE_FEE_PERCENTAGE")
    default_service_fee_mode: ServiceFeeMode = Field(ServiceFeeMode.PROPORTIONAL, alias="DEFAULT_SERVICE_FEE_MODE")
    currency_symbol: str = Field("R$", alias="CURRENCY_SYMBOL")
    decimal_separator: str = Field(",", alias="DECIMAL_SEPARATOR")
    currency_places: int = Field(2, ge=0, alias="CURRENCY_PLACES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
