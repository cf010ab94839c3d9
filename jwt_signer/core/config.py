from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "JWT Signer"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = []
    LOG_LEVEL: str = "INFO"

    # Signing key. PRIVATE_KEY wins over PRIVATE_KEY_PATH when both are set.
    PRIVATE_KEY: Optional[str] = None
    PRIVATE_KEY_PATH: Optional[str] = None
    PRIVATE_KEY_PASSWORD: Optional[str] = None
    KEY_ID: Optional[str] = None

    # Claim defaults
    DEFAULT_ISSUER: Optional[str] = None
    DEFAULT_AUDIENCE: Optional[str] = None
    DEFAULT_EXPIRES_IN: str = "3600s"

    # Access guard
    SIGNING_SECRET: Optional[str] = None
    SIGNING_SECRET_HEADER: str = "X-Signing-Secret"

    # Rate Limiting
    RATE_LIMIT_MAX: int = 60
    RATE_LIMIT_WINDOW: int = 60  # 1 minute

settings = Settings()
