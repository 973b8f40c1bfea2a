from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEV_JWT_SECRET = "development-only-secret-change-me-in-production"

# Variables the service cannot run properly without
REQUIRED_ENV_VARS = {
    "GEMINI_API_KEY": "Google Gemini API key (KEEP SECRET)",
}


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "Spendwise"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:8000"])
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_USERS_TABLE: str = Field(default="spendwise-users")
    DYNAMO_EXPENSES_TABLE: str = Field(default="spendwise-expenses")
    DYNAMO_PROFILES_TABLE: str = Field(default="spendwise-profiles")

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default=DEV_JWT_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Gemini
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-1.5-pro")
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_MAX_RETRIES: int = 2
    AI_RETRY_DELAY_MS: int = 1000

    DEFAULT_CURRENCY: str = "USD"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


def verify_settings(config: Settings) -> List[str]:
    """Return a description for every required variable that is not set."""
    problems = []
    for name, description in REQUIRED_ENV_VARS.items():
        if not getattr(config, name, ""):
            problems.append(f"{name} is not set ({description})")
    if config.JWT_SECRET_KEY == DEV_JWT_SECRET:
        problems.append("JWT_SECRET_KEY is using the development default")
    return problems


settings = Settings()
