from __future__ import annotations

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./carwash.db"
    app_env: str = "dev"
    app_cors_origins: str = "*"
    log_level: str = "INFO"
    # Shared secret unlocking admin mode (inventory, catalogue, CRM, status changes)
    admin_password: str = "change-me"
    # ISV. Currently not charged; set e.g. TAX_RATE=0.15 to re-enable.
    tax_rate: Decimal = Decimal("0")
    # Branch/till identifier in front of every invoice number
    invoice_prefix: str = "001"
    currency: str = "L."
    seed_demo_data: bool = True


settings = Settings()
