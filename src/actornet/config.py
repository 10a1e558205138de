"""Configuration management using Pydantic Settings."""

from datetime import date

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Query service (relationships, actors, documents, deep search)
    query_service_url: str = "http://localhost:3001/api"
    query_service_timeout: float = 60.0

    # LLM Configuration (remote OpenAI-compatible endpoint)
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    llm_api_key: str | None = Field(
        default=None,
        description="Without a key every answer is the no-lawyer placeholder"
    )
    llm_max_concurrent: int = 4
    llm_timeout: float = 60.0
    llm_temperature: float = 0.7
    chat_max_tokens: int = 600
    entity_max_tokens: int = 200
    event_max_tokens: int = 120
    document_max_tokens: int = 300

    # Principal entity (center of the graph, hop distance 0)
    principal_entity: str = "Jeffrey Epstein"

    # Time-as-depth mapping
    time_window_start: date = date(1970, 1, 1)
    time_window_end: date = date(2025, 12, 31)
    depth_scale: float = Field(
        default=200.0,
        description="Total depth range in world units, centered on 0"
    )

    # Node / link metrics
    min_node_radius: float = 0.5
    max_node_radius: float = 4.0
    weak_link_threshold: float = 0.3

    # Flat graph view
    graph_top_n: int = Field(
        default=200,
        description="Most-connected entities rendered in the flat graph"
    )
    node_search_limit: int = 8

    # 2D force simulation (d3-style)
    force_link_distance: float = 60.0
    force_link_strength: float = 0.5
    force_charge_strength: float = -100.0
    force_collide_radius: float = 20.0
    force_iterations: int = 300
    force_velocity_decay: float = 0.4
    viewport_width: float = 1200.0
    viewport_height: float = 800.0

    # Spatial ring layout
    ring_hop_spacing: float = 80.0
    ring_radius_jitter: float = 20.0
    ring_variance: float = 30.0
    ring_height_variance: float = 40.0
    ring_importance_bias: float = 20.0
    ring_overflow_hop: int = Field(
        default=10,
        description="Ring used for entities unreachable from the principal"
    )
    ring_rotation_step: float = 0.5

    # Co-occurrence bubble map
    bubble_iterations: int = 100
    bubble_gap: float = 15.0
    bubble_canvas_size: float = 3000.0
    bubble_center_pull: float = 0.005
    bubble_zoom_level: float = 2.8
    bubble_zoom_duration: float = 0.8

    # View/selection controller
    filter_debounce_seconds: float = Field(
        default=2.0,
        description="Inactivity delay before continuous filter edits are applied"
    )
    actor_search_min_length: int = 2
    default_fetch_limit: int = 15000
    default_year_min: int = 1980
    default_year_max: int = 2025
    default_max_hops: int | None = 4
    animation_frame_interval: float = 1 / 60

    # Conversational query builder
    chat_max_search_terms: int = 5
    chat_thorough_search: bool = True
    chat_max_excerpts: int = 8
    chat_max_events: int = 30
    chat_max_documents: int = 15
    chat_max_actors: int = 15
    chat_max_locations: int = 10
    chat_max_associates: int = 15
    chat_max_relationships: int = 10
    entity_prompt_max_events: int = 15
    document_text_limit: int = 8000


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(
        default_fetch_limit=2000,
        filter_debounce_seconds=0.5,
    )


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        llm_api_key="test-key",
        filter_debounce_seconds=0.05,
        force_iterations=60,
        animation_frame_interval=0.001,
        bubble_zoom_duration=0.02,
    )


# Global settings instance
settings = Settings()
