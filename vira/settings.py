"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./vira.db",
        description="SQLAlchemy connection URL",
    )
    db_pool_size: int = Field(default=5, ge=1, le=20, description="Connection pool size")
    db_pool_max_overflow: int = Field(
        default=10, ge=0, le=50, description="Max overflow connections"
    )

    # OpenAI
    openai_api_key: str = Field(default="", description="OpenAI API key")

    # AI settings
    ai_model: str = Field(default="gpt-4o-mini", description="LLM model for ranking and chat")
    ai_temperature: float = Field(
        default=0.3, ge=0.0, le=2.0, description="LLM temperature"
    )
    ai_timeout_seconds: float = Field(
        default=20.0, gt=0, le=120, description="Deadline for a single model call"
    )
    ai_retry_attempts: int = Field(
        default=2, ge=1, le=5, description="Total model call attempts (2 = one retry)"
    )
    ai_retry_wait_min: float = Field(
        default=1.0, ge=0, description="Minimum backoff between attempts in seconds"
    )
    ai_retry_wait_max: float = Field(
        default=8.0, ge=0, description="Maximum backoff between attempts in seconds"
    )

    # Matching
    match_top_k: int = Field(
        default=8, ge=1, le=25, description="Candidates sent to the model for ranking"
    )
    max_remaining_vendors: int = Field(
        default=100, ge=0, description="Cap for vendors returned with pre-score only"
    )
    min_project_scope_length: int = Field(
        default=10, ge=0, description="Minimum project scope length for match requests"
    )

    # Pre-score weights (tunable, not a contract)
    prescore_weight_rating: float = Field(
        default=50.0, ge=0, description="Points for a perfect 10/10 average rating"
    )
    prescore_weight_recommendation: float = Field(
        default=30.0, ge=0, description="Points for a 100% recommendation rate"
    )
    prescore_weight_volume: float = Field(
        default=10.0, ge=0, description="Points for a fully established project history"
    )
    prescore_confidence_half_saturation: float = Field(
        default=3.0, gt=0, description="Completed projects at which confidence reaches 0.5"
    )
    prescore_prior: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Neutral quality assumed without history"
    )
    prescore_bonus_available: float = Field(default=10.0, description="Available vendors")
    prescore_bonus_limited: float = Field(default=3.0, description="Limited availability")
    prescore_penalty_on_leave: float = Field(default=-5.0, description="Vendors on leave")
    prescore_penalty_unavailable: float = Field(
        default=-10.0, description="Unavailable vendors"
    )

    # Chat
    chat_history_window: int = Field(
        default=10, ge=1, description="Messages returned to the client per turn"
    )
    chat_context_messages: int = Field(
        default=6, ge=0, description="History messages passed to the model as context"
    )
    chat_recommendations_shown: int = Field(
        default=3, ge=1, description="Recommendations listed in a chat reply"
    )
    chat_search_limit: int = Field(
        default=10, ge=1, le=50, description="Maximum directory search results"
    )
    chat_session_ttl_minutes: Optional[int] = Field(
        default=None, ge=1, description="Idle minutes before a session may be evicted"
    )
    chat_store_backend: Literal["memory", "database"] = Field(
        default="memory", description="Conversation store implementation"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[Path] = Field(
        default=None, description="Optional log file path"
    )


# Singleton settings instance
settings = Settings()
