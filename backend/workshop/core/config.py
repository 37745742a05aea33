from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod|test
    TZ: str = Field(default="America/Sao_Paulo")

    # Security
    JWT_SECRET: str = Field(default="change-me")
    JWT_ALG: str = Field(default="HS256")
    JWT_EXPIRES_MIN: int = Field(default=60 * 12)

    # DB
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/app")
    DB_POOL_TIMEOUT: int = Field(default=10)  # seconds waiting for a pooled connection
    DB_STATEMENT_TIMEOUT_MS: int = Field(default=15000)

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173")

    # Public links
    PUBLIC_BASE_URL: str = Field(default="http://localhost:5173")
    PUBLIC_TOKEN_BYTES: int = Field(default=32, ge=16)

    # Files
    EXPORT_DIR: str = Field(default="/app/data/exports")

    # PDF header
    COMPANY_NAME: str = Field(default="Oficina Mecânica")
    COMPANY_ADDRESS: str | None = Field(default=None)
    COMPANY_PHONE: str | None = Field(default=None)

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)
    DEMO_ADMIN_EMAIL: str = Field(default="admin@example.com")
    DEMO_ADMIN_PASSWORD: str = Field(default="admin123")


settings = Settings()
