"""Application settings read from the environment (and `.env`)."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROTEAN_ENV: str = Field("development", description="Runtime environment: development, test, staging, production")
    LOG_LEVEL: str | None = Field(None, description="Overrides the per-environment default log level")
    LOG_DIR: str = Field("logs", description="Directory for rotating log files")

    # JWT
    JWT_SECRET_KEY: str = Field("change-me-in-production", description="HMAC secret for access and refresh tokens")
    JWT_ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)

    # HTTP
    CORS_ORIGINS: str = Field("*", description="Comma separated list of allowed origins")

    # Cart & checkout
    CHECKOUT_TTL_MINUTES: int = Field(15, description="Minutes before an open checkout expires")
    RESERVATION_TTL_MINUTES: int = Field(30, description="Default stock reservation hold")
    RESERVATION_MAX_EXTENSION_MINUTES: int = Field(120, description="Total extension allowed past the initial hold")
    GUEST_CART_TTL_DAYS: int = Field(30)

    # Loyalty & payments
    LOYALTY_POINTS_PER_UNIT: float = Field(1.0, description="Points earned per currency unit spent")
    BNPL_DEFAULT_INSTALLMENTS: int = Field(4)
    BNPL_INTERVAL_DAYS: int = Field(14)

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.PROTEAN_ENV.lower() in ("production", "staging")


@lru_cache
def get_settings() -> Settings:
    return Settings()
