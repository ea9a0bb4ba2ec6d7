"""Client configuration via pydantic-settings."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .retry import RetryPolicy


class ServiceConfig(BaseModel):
    """A remote annotation service the client is embedded for."""

    authority: str | None = None
    grant_token: str | None = Field(default=None, alias="grantToken")

    model_config = {"populate_by_name": True}


class ClientSettings(BaseSettings):
    service_url: str = "http://localhost:5000/"
    api_url: str = "http://localhost:5000/api/"
    services: list[ServiceConfig] = []
    csrf_header_name: str = "X-CSRF-Token"
    session_cache_ttl: float = 300.0
    request_timeout: float = 30.0

    # Backoff for session loads
    retry_attempts: int = 10
    retry_min_delay: float = 1.0
    retry_max_delay: float = 30.0
    retry_factor: float = 2.0

    model_config = {"env_prefix": "ANNOTATOR_", "env_file": ".env", "extra": "ignore"}

    @property
    def primary_service(self) -> ServiceConfig | None:
        # Only the first configured service is consulted.
        return self.services[0] if self.services else None

    @property
    def authority(self) -> str | None:
        service = self.primary_service
        return service.authority if service else None

    @property
    def grant_token(self) -> str | None:
        service = self.primary_service
        return service.grant_token if service else None

    @property
    def session_url(self) -> str:
        return self.service_url.rstrip("/") + "/app"

    @property
    def token_url(self) -> str:
        return self.api_url.rstrip("/") + "/token"

    @property
    def profile_url(self) -> str:
        return self.api_url.rstrip("/") + "/profile"

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            attempts=self.retry_attempts,
            min_delay=self.retry_min_delay,
            max_delay=self.retry_max_delay,
            factor=self.retry_factor,
        )


settings = ClientSettings()
