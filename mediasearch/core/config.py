from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REPO_API_URL = "https://www.wikidata.org/w/api.php"


class EntitySearchSettings(BaseModel):
    external_entity_search_base_uri: str | None = Field(
        default=None,
        description="Dedicated entity search endpoint; preferred over the repository API when set.",
    )
    repo_api_url: str | None = Field(
        default=None,
        description="MediaInfo repository API URL, used when no external search endpoint is configured.",
    )
    wb_repo_api_url: str = Field(
        DEFAULT_REPO_API_URL,
        min_length=1,
        description="Wikibase repository API URL used as the last fallback.",
    )
    user_language: str = Field("en", min_length=1, description="Language used for search and display.")
    entity_type: str = Field("item", min_length=1)
    request_limit: int = Field(
        50,
        ge=1,
        le=50,
        description="Matches requested per lookup; more than the display limit so duplicates can be omitted.",
    )
    timeout_seconds: float = Field(10.0, ge=0.1)
    max_retries: int = Field(2, ge=0, description="Extra attempts for transient transport failures.")
    retry_backoff_seconds: float = Field(0.5, ge=0.0)
    max_backoff_seconds: float = Field(8.0, ge=0.0)
    max_concurrent_requests: int = Field(4, ge=2, description="Lookups allowed in flight on the shared client.")
    user_agent: str = Field("mediasearch-autocomplete/0.1.0", min_length=1)

    def resolve_api_url(self) -> str:
        for candidate in (self.external_entity_search_base_uri, self.repo_api_url, self.wb_repo_api_url):
            if candidate:
                return candidate
        return DEFAULT_REPO_API_URL


class AutocompleteSettings(BaseModel):
    lookup_results_limit: int = Field(7, ge=1, description="Maximum suggestions surfaced to the UI.")
    last_word_lookup_enabled: bool = Field(
        True,
        description="Issue a second lookup for the final word of multi-word input.",
    )


class ObservabilitySettings(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = Field("json", description="Renderer used for structured log lines.")


class Settings(BaseSettings):
    environment: Literal["local", "test", "production"] = Field("local")

    entity_search: EntitySearchSettings = Field(default_factory=EntitySearchSettings)  # type: ignore[arg-type]
    autocomplete: AutocompleteSettings = Field(default_factory=AutocompleteSettings)  # type: ignore[arg-type]
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)  # type: ignore[arg-type]

    model_config = SettingsConfigDict(
        env_prefix="MEDIASEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )


@lru_cache(maxsize=1)
def _get_cached_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def get_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Return settings, using cached defaults unless overrides are provided."""
    if overrides:
        return Settings(**dict(overrides))
    return _get_cached_settings()
