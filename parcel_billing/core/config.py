from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "parcel-billing"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/parcel_billing.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Billing
    DEFAULT_CURRENCY: str = "AED"
    TAX_RATE: Decimal = Decimal("0")  # flat rate applied to invoice subtotals, e.g. 0.05
    INVOICE_PAYMENT_TERM_DAYS: int = 30

    # Rating
    INCLUDED_WEIGHT_KG: int = 5
    VOLUMETRIC_DIVISOR: int = 5000

    # Cash on delivery
    COD_FEE_PERCENTAGE: Decimal = Decimal("3.3")
    COD_MIN_FEE: Decimal = Decimal("2.00")

    @property
    def version(self) -> str:
        return "0.1.0"


settings = Settings()
