"""Centralized configuration for acuref-search using Pydantic Settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All environment variables are validated at startup with proper types.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Query behaviour
    search_max_results: int = Field(default=50, ge=1, description="Maximum results returned by one search")
    search_fuzzy_tolerance: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Allowed edit distance as a fraction of the query term length",
    )
    search_fuzzy_enabled: bool = Field(default=True, description="Match indexed terms within the fuzzy tolerance")
    search_prefix_enabled: bool = Field(default=True, description="Match indexed terms starting with a query term")
    search_combine_with: Literal["or", "and"] = Field(
        default="or",
        description="'or' returns records matching any query term, 'and' requires every term",
    )

    # Snippets
    snippet_length: int = Field(default=150, ge=20, description="Maximum snippet length, ellipses included")
    snippet_context_chars: int = Field(default=50, ge=0, description="Characters shown before the first match")

    # Autosuggest
    suggest_limit: int = Field(default=10, ge=1, description="Default number of autosuggest completions")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Tracing
    tracing_enabled: bool = Field(default=True, description="Install an OpenTelemetry tracer provider at startup")
    service_name: str = Field(default="acuref-search", min_length=1, description="service.name reported on spans")

    @model_validator(mode="after")
    def _check_snippet_window(self) -> "Settings":
        if self.snippet_context_chars >= self.snippet_length:
            raise ValueError(
                "SNIPPET_CONTEXT_CHARS must be smaller than SNIPPET_LENGTH so the match itself fits in the snippet."
            )
        return self
