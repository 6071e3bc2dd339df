from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FinanceTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5000", "http://localhost:8000"]
    )

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)  # e.g. http://localhost:8001 for DynamoDB Local
    DYNAMO_USERS_TABLE: str = Field(default="finance-tracker-users", validation_alias="DYNAMO_TABLE_USERS")
    DYNAMO_CATEGORIES_TABLE: str = Field(
        default="finance-tracker-categories", validation_alias="DYNAMO_TABLE_CATEGORIES"
    )
    DYNAMO_TRANSACTIONS_TABLE: str = Field(
        default="finance-tracker-transactions", validation_alias="DYNAMO_TABLE_TRANSACTIONS"
    )

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production", validation_alias="JWT_SECRET")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Transactions listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Rate limiting, active only when ENVIRONMENT is "production"
    ENVIRONMENT: str = Field(default="development")
    RATE_LIMIT_DISABLE: bool = Field(default=False)
    RATE_LIMIT_STORAGE_URI: str = Field(default="memory://")  # e.g. redis://localhost:6379 across workers
    AUTH_RATE_LIMIT: str = "5 per 15 minutes"
    TRANSACTION_RATE_LIMIT: str = "100 per hour"
    ANALYTICS_RATE_LIMIT: str = "50 per hour"

    # Default categories and demo users on startup
    SEED_DEFAULT_DATA: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
