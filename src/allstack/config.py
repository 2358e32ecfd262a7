"""Client configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from allstack.errors import ConfigError

DEFAULT_BASE_URL = "http://localhost:8080/api/client"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_key: str = Field(alias="ALLSTACK_API_KEY", default="")
    environment: str = Field(alias="ALLSTACK_ENVIRONMENT", default="production")
    release: str = Field(alias="ALLSTACK_RELEASE", default="1.0.0")
    component: str = Field(alias="ALLSTACK_COMPONENT", default="my-component")
    base_url: str = Field(alias="ALLSTACK_BASE_URL", default=DEFAULT_BASE_URL)

    # Rate limiting
    rate_limit_per_minute: int = Field(alias="ALLSTACK_RATE_LIMIT_PER_MINUTE", default=100)

    # Delivery
    timeout_seconds: float = Field(alias="ALLSTACK_TIMEOUT_SECONDS", default=5.0)
    connect_timeout_seconds: float = Field(
        alias="ALLSTACK_CONNECT_TIMEOUT_SECONDS", default=5.0
    )
    max_attempts: int = Field(alias="ALLSTACK_MAX_ATTEMPTS", default=3)
    retry_delay_seconds: float = Field(alias="ALLSTACK_RETRY_DELAY_SECONDS", default=1.0)


def validate_settings(settings: Settings) -> None:
    problems: list[str] = []
    if not settings.api_key.strip():
        problems.append("ALLSTACK_API_KEY")
    if not settings.environment.strip():
        problems.append("ALLSTACK_ENVIRONMENT(non-empty value required)")
    if not settings.base_url.startswith(("http://", "https://")):
        problems.append("ALLSTACK_BASE_URL(http or https URL required)")
    if settings.rate_limit_per_minute <= 0:
        problems.append("ALLSTACK_RATE_LIMIT_PER_MINUTE(must be positive)")
    if settings.max_attempts < 1:
        problems.append("ALLSTACK_MAX_ATTEMPTS(must be at least 1)")
    if settings.retry_delay_seconds < 0:
        problems.append("ALLSTACK_RETRY_DELAY_SECONDS(must not be negative)")
    if settings.timeout_seconds <= 0 or settings.connect_timeout_seconds <= 0:
        problems.append("ALLSTACK_TIMEOUT_SECONDS(timeouts must be positive)")

    if problems:
        keys = ", ".join(problems)
        raise ConfigError(f"invalid allstack configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
