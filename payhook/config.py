from functools import lru_cache
from typing import List, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TOLERANCE = 300
DEFAULT_SCHEME = "v1"
DEFAULT_API_VERSION = "2020-08-27"


class Settings(BaseSettings):
    """
    Webhook verification settings loaded from environment variables.
    Follows 12-factor app configuration principles.
    """

    # env_file is only used as fallback, env vars take precedence
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Signing secret used when a caller does not pass one explicitly
    WEBHOOK_SECRET: Optional[SecretStr] = None

    # Additional active secrets during rotation, as a JSON list
    WEBHOOK_SECRETS: List[SecretStr] = []

    # Maximum allowed clock difference in seconds; <= 0 disables the check
    WEBHOOK_TOLERANCE: int = DEFAULT_TOLERANCE

    SIGNATURE_SCHEME: str = DEFAULT_SCHEME

    # API version the event schemas in this package are written against
    API_VERSION: str = DEFAULT_API_VERSION

    LOG_LEVEL: str = "INFO"

    def configured_secrets(self) -> List[bytes]:
        """Return every configured signing secret as raw bytes, primary first."""
        secrets = []
        if self.WEBHOOK_SECRET is not None:
            secrets.append(self.WEBHOOK_SECRET.get_secret_value().encode("utf-8"))
        for secret in self.WEBHOOK_SECRETS:
            secrets.append(secret.get_secret_value().encode("utf-8"))
        return secrets


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every verification.
    """
    return Settings()
