"""Configuration settings for the coaching services."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoachConfig(BaseSettings):
    """Coaching, recommendation and provider settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `COACH_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="COACH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM settings
    llm_provider: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic, azure, etc.)",
    )
    llm_model: str = Field(
        default="gpt-4o",
        description="LLM model name",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="Timeout in seconds for LLM calls",
    )
    llm_max_retries: Annotated[int, Field(ge=0)] = Field(
        default=0,
        description="Retry attempts for LLM calls (0 = single attempt, then fallback)",
    )
    llm_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.7,
        description="Sampling temperature for generated text",
    )
    reassess_with_llm: bool = Field(
        default=True,
        description="Re-score category updates with the LLM; false uses the fixed rules",
    )

    # Recommendation settings
    recommendation_cap: Annotated[int, Field(ge=1)] = Field(
        default=5,
        description="Maximum recommendations returned per category",
    )
    min_primary_results: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Search results needed before generation is skipped",
    )
    generation_count: Annotated[int, Field(ge=1)] = Field(
        default=3,
        description="Recommendations requested from the generative backend",
    )
    score_window: Annotated[int, Field(ge=0, le=100)] = Field(
        default=20,
        description="Half-width of the target score range used to filter search",
    )
    dedupe_titles: bool = Field(
        default=False,
        description="Drop later recommendations whose title repeats an earlier one",
    )
    resource_cap: Annotated[int, Field(ge=1)] = Field(
        default=5,
        description="Maximum resources returned per topic",
    )

    # Knowledge source settings
    search_path: Path = Field(
        default=Path("./data/chroma"),
        description="Directory of the persistent Chroma store",
    )
    search_collection: str = Field(
        default="sustainability_recommendations",
        description="Collection holding recommendation documents",
    )
    resource_collection: str = Field(
        default="sustainability_resources",
        description="Collection holding resource documents",
    )

    @model_validator(mode="after")
    def validate_result_thresholds(self) -> CoachConfig:
        """The search threshold must be reachable within the cap."""
        if self.min_primary_results > self.recommendation_cap:
            raise ValueError(
                "min_primary_results must not exceed recommendation_cap "
                f"(got {self.min_primary_results} > {self.recommendation_cap})."
            )
        return self


# Singleton instance for easy import
_coach_config: CoachConfig | None = None


def get_coach_config() -> CoachConfig:
    """Get the coach configuration singleton."""
    global _coach_config
    if _coach_config is None:
        _coach_config = CoachConfig()
    return _coach_config


def reset_coach_config() -> None:
    """Reset the coach configuration singleton (useful for testing)."""
    global _coach_config
    _coach_config = None
