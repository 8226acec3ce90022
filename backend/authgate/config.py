import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from authgate.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "AuthGate"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Session tokens
    jwt_secret: str = Field(default="")
    session_token_ttl_seconds: int = Field(default=3600, gt=0)

    # Identity provider (Firebase)
    firebase_api_key: str = Field(default="")
    firebase_credentials_path: str = Field(default="serviceAccountKey.json")
    identity_toolkit_url: str = Field(default=DEFAULT_IDENTITY_TOOLKIT_URL)
    provider_timeout: float = Field(default=10.0, gt=0)
    provider_max_retries: int = Field(default=2, ge=1)

    def validate_security(self) -> None:
        missing = []
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if not self.firebase_api_key:
            missing.append("FIREBASE_API_KEY")
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} must be set in the environment. "
                "Refusing to start without them."
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
