"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingBackend(str, Enum):
    """Which embedding provider to construct."""

    REMOTE = "remote"  # OpenAI-compatible /embeddings endpoint
    LOCAL = "local"  # sentence-transformers model
    HASH = "hash"  # Deterministic fallback only


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MESHFLOW_",
        case_sensitive=False,
    )

    # Embeddings Configuration
    embedding_backend: EmbeddingBackend = EmbeddingBackend.HASH
    embedding_base_url: str = "https://api.openai.com/v1"
    embedding_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    local_embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimensions: int = Field(
        default=384,
        gt=0,
        description="Vector dimension D, fixed per deployment",
    )
    embedding_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for the provider before falling back",
    )
    embedding_max_chars: int = Field(
        default=8000,
        description="Input is truncated to this many characters before embedding",
    )
    embedding_max_concurrent: int = 8

    # Auto-link Parameters
    auto_link_threshold: float = Field(
        default=0.82,
        ge=0.0,
        le=1.0,
        description="Similarity at or above which an edge is created",
    )
    suggest_threshold: float = Field(
        default=0.68,
        ge=0.0,
        le=1.0,
        description="Lower bound of the suggestion band",
    )
    max_auto_links: int = Field(
        default=5,
        ge=1,
        description="Fan-out cap: max edges created per auto-link pass",
    )

    # Clustering Parameters
    cluster_passes: int = Field(default=10, ge=1)
    cluster_seed: int | None = None

    # Layout Parameters
    layout_width: float = 1000.0
    layout_height: float = 800.0
    link_distance: float = 150.0
    link_strength: float = 0.5
    charge_strength: float = -300.0
    collision_radius: float = 50.0
    layout_ticks: int = Field(default=300, ge=1)
    radial_radius: float = 300.0
    level_offset: float = 150.0
    sibling_spacing: float = 200.0
    semantic_distance_threshold: float = Field(
        default=0.3,
        description="Euclidean embedding distance under which nodes share a group",
    )

    # Animation Parameters
    animation_duration: float = Field(
        default=2.0,
        gt=0,
        description="Seconds an animated layout takes to reach its targets",
    )
    animation_fps: int = Field(default=60, ge=1)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.suggest_threshold > self.auto_link_threshold:
            raise ValueError(
                f"suggest_threshold ({self.suggest_threshold}) must not exceed "
                f"auto_link_threshold ({self.auto_link_threshold})"
            )
        return self


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(
        embedding_backend=EmbeddingBackend.LOCAL,
        local_embedding_model="all-MiniLM-L6-v2",
        embedding_dimensions=384,
    )


def get_prod_settings() -> Settings:
    """Get production environment settings (remote OpenAI-compatible embeddings)."""
    return Settings(
        embedding_backend=EmbeddingBackend.REMOTE,
        embedding_model="text-embedding-3-small",
        embedding_dimensions=1536,
        embedding_max_concurrent=32,
    )


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        embedding_backend=EmbeddingBackend.HASH,
        embedding_dimensions=64,
        cluster_seed=42,
        animation_duration=0.05,
        animation_fps=100,
    )


# Global settings instance
settings = Settings()
