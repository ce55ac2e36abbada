import enum
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices


class ImbalancePolicy(str, enum.Enum):
    reject = "reject"
    suspense = "suspense"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "postgresql+asyncpg://localhost:5432/splitledger"
    settlement_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        validation_alias=AliasChoices("settlement_tolerance", "balance_tolerance"),
    )
    imbalance_policy: ImbalancePolicy = ImbalancePolicy.reject
    suspense_name: str = "Suspense"
    log_level: str = "INFO"


settings = Settings()
