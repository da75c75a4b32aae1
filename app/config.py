"""
Application Configuration.

Pydantic settings for type-safe environment configuration.
Covers the model provider (OpenAI, Gemini, local Ollama) and the
multi-pass defaults: pass count, merge strategy, theta and temperatures.
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelProviderId(str, Enum):
    """Supported model providers."""

    OPENAI = "openai"
    GEMINI = "gemini"
    OLLAMA = "ollama"


class PassStrategy(str, Enum):
    """How multiple passes are reconciled."""

    INTERSECTION = "intersection"  # keep only corroborated findings
    UNION = "union"                # keep everything, drop exact repeats


class AnalysisEmphasis(str, Enum):
    """Bias of the analysis toward recall or precision."""

    AVOID_FALSE_NEGATIVES = "avoid-false-negatives"
    NEUTRAL = "neutral"
    AVOID_FALSE_POSITIVES = "avoid-false-positives"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Provider Selection ===
    llm_provider: ModelProviderId = Field(
        default=ModelProviderId.OPENAI,
        description="Model provider: 'openai', 'gemini' or 'ollama'",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model to use with the selected provider",
    )

    # === Credentials ===
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (required if llm_provider='openai')",
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key (required if llm_provider='gemini')",
    )

    # === Ollama Configuration ===
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL",
    )
    ollama_request_timeout: float = Field(
        default=120.0,
        description="Request timeout for Ollama in seconds",
    )

    # === Multi-Pass Defaults ===
    number_of_passes: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Independent analysis passes per run",
    )
    pass_strategy: PassStrategy = Field(
        default=PassStrategy.INTERSECTION,
        description="How to reconcile multiple passes",
    )
    merge_theta: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Cosine similarity threshold for intersection merges",
    )
    single_pass_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Temperature for a single pass (conservative)",
    )
    multi_pass_temperature: float = Field(
        default=0.5,
        ge=0.0,
        le=2.0,
        description="Temperature for each pass of a multi-pass run (more diverse)",
    )
    analysis_emphasis: AnalysisEmphasis = Field(
        default=AnalysisEmphasis.NEUTRAL,
        description="Recall/precision bias appended to the base prompt",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # === API Configuration ===
    api_host: str = Field(
        default="0.0.0.0",
        description="API host to bind to",
    )
    api_port: int = Field(
        default=8000,
        description="API port to bind to",
    )

    def api_key_for(self, provider: ModelProviderId | str) -> str | None:
        """Configured API key for a provider, or None if not set."""
        match ModelProviderId(provider):
            case ModelProviderId.OPENAI:
                return self.openai_api_key or None
            case ModelProviderId.GEMINI:
                return self.gemini_api_key or None
            case _:
                return None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
