"""Client configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

TRAKT_API_ENDPOINT = "http://api.trakt.tv"
RETURN_FORMAT = "json"
# Sent as the trakt-api-version header; not configurable
TRAKT_API_VERSION = "2"


class Settings(BaseSettings):
    """Endpoint and logging options, overridable through environment variables.

    No ``.env`` file is read unless the application asks for one, e.g.
    ``Settings(_env_file=".env")``. The API key is not part of it; set it on
    the client.
    """

    model_config = SettingsConfigDict(extra="ignore")

    # --- Trakt API ---
    trakt_api_endpoint: str = TRAKT_API_ENDPOINT
    # Trakt only serves JSON
    trakt_return_format: Literal["json"] = RETURN_FORMAT

    # --- Observability ---
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @property
    def base_url(self) -> str:
        return self.trakt_api_endpoint.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
