"""Configuration for the text extraction service.

Environment variables (env names in parentheses):
 - AZURE_DI_ENDPOINT (required) Document Intelligence resource base URL
 - AZURE_DI_KEY (required) resource key, sent as ``Ocp-Apim-Subscription-Key``
 - AZURE_DI_API_VERSION / AZURE_DI_FALLBACK_API_VERSION
 - AZURE_DI_POLL_INTERVAL_SECONDS / AZURE_DI_POLL_TIMEOUT_SECONDS
 - AZURE_DI_REQUEST_TIMEOUT_SECONDS
 - CORS_ALLOW_ORIGIN / CORS_ALLOW_HEADERS
 - ENABLE_METRICS

Credentials are read per request through `load_config()` so a rotated key is
picked up without a restart. `get_config()` is the cached variant used for
app-wide settings (CORS, metrics) at startup.
"""
from __future__ import annotations

from functools import lru_cache

import pydantic
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from text_extraction.errors import ConfigurationError

PRIMARY_API_VERSION = "2024-11-30"
FALLBACK_API_VERSION = "2023-07-31"


def parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class AppConfig(BaseSettings):
    azure_di_endpoint: str = Field(
        '',
        validation_alias=AliasChoices('AZURE_DI_ENDPOINT', 'AZURE_DOCUMENT_INTELLIGENCE_ENDPOINT'),
    )
    azure_di_key: str = Field(
        '',
        validation_alias=AliasChoices('AZURE_DI_KEY', 'AZURE_DOCUMENT_INTELLIGENCE_KEY'),
    )
    api_version: str = Field(PRIMARY_API_VERSION, validation_alias='AZURE_DI_API_VERSION')
    fallback_api_version: str = Field(FALLBACK_API_VERSION, validation_alias='AZURE_DI_FALLBACK_API_VERSION')
    poll_interval_seconds: float = Field(1.0, validation_alias='AZURE_DI_POLL_INTERVAL_SECONDS')
    # Unset means polling lasts until the operation finishes or the platform cuts the request.
    poll_timeout_seconds: float | None = Field(None, validation_alias='AZURE_DI_POLL_TIMEOUT_SECONDS')
    request_timeout_seconds: float = Field(60.0, validation_alias='AZURE_DI_REQUEST_TIMEOUT_SECONDS')
    cors_allow_origin: str = Field('*', validation_alias='CORS_ALLOW_ORIGIN')
    cors_allow_headers: str = Field(
        'Content-Type, x-vercel-protection-bypass', validation_alias='CORS_ALLOW_HEADERS'
    )
    cors_max_age: int = Field(86400, validation_alias='CORS_MAX_AGE')
    enable_metrics_raw: str | bool | None = Field(True, validation_alias='ENABLE_METRICS')

    model_config = SettingsConfigDict(
        env_file='.env', extra='ignore', case_sensitive=False, env_ignore_empty=True
    )

    @property
    def endpoint(self) -> str:
        return self.azure_di_endpoint.strip().rstrip("/")

    @property
    def enable_metrics(self) -> bool:
        raw = self.enable_metrics_raw
        if isinstance(raw, bool):
            return raw
        return parse_bool(str(raw))

    def validate_required(self) -> None:
        if not self.azure_di_endpoint.strip() or not self.azure_di_key.strip():
            raise ConfigurationError("Missing AZURE_DI_ENDPOINT or AZURE_DI_KEY")


def load_config() -> AppConfig:
    """Build a fresh configuration from the current environment.

    Raises `ConfigurationError` when a variable cannot be parsed, so a bad value
    picked up at request time still renders as a JSON error.
    """
    try:
        return AppConfig()  # type: ignore[call-arg]
    except pydantic.ValidationError as exc:
        fields = sorted(
            {".".join(str(part) for part in err["loc"]) for err in exc.errors()}
        )
        raise ConfigurationError(
            f"Invalid configuration: {', '.join(fields) or 'settings'}"
        ) from exc


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "get_config", "load_config", "parse_bool"]
