"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GEOINTEL_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Geospatial Intelligence API"
    api_prefix: str = "/api"

    # Mapping provider
    maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Maps web services.",
    )
    maps_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api",
        description="Root URL of the mapping provider web services.",
    )
    request_timeout_seconds: float = Field(default=5.0, gt=0.0)
    health_check_timeout_seconds: float = Field(default=3.0, gt=0.0)
    health_check_interval_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Seconds between periodic health checks (0 disables the monitor).",
    )
    max_parallel_requests: int = Field(default=8, ge=1)

    # Address resolution
    nearby_suggestion_radius_m: int = Field(default=1000, ge=1)
    max_suggestions: int = Field(default=5, ge=0)
    max_reverse_alternatives: int = Field(default=3, ge=0)

    # Hotspot clustering
    hotspot_eps_meters: float = Field(
        default=500.0,
        gt=0.0,
        description="DBSCAN neighbourhood radius in meters.",
    )
    hotspot_min_points: int = Field(
        default=3,
        ge=1,
        description="DBSCAN minimum neighbourhood size (including the point itself).",
    )
    hotspot_nearby_radius_m: int = Field(default=500, ge=1)
    hotspot_nearby_limit: int = Field(default=5, ge=0)
    hotspot_place_type: str = Field(default="establishment")

    # Route optimization weighting policy (bonuses are expressed in km of travel)
    route_average_speed_kmh: float = Field(default=40.0, gt=0.0)
    route_time_window_weight: float = Field(
        default=0.05,
        ge=0.0,
        description="Bonus km per minute of time-window urgency.",
    )
    route_premium_bonus: float = Field(
        default=2.0,
        ge=0.0,
        description="Bonus km for premium-tier customers.",
    )
    route_value_weight: float = Field(
        default=0.01,
        ge=0.0,
        description="Bonus km per unit of order value.",
    )
    route_urgency_horizon_minutes: float = Field(default=60.0, gt=0.0)
    traffic_model: str = Field(default="best_guess")
    time_window_intervals: tuple[str, ...] = Field(
        default=("morning", "midday", "evening", "night"),
        description="Day-part labels used for delivery time-window estimation.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    time_window_table: str = Field(default="time_windows")

    @field_validator("frontend_allowed_origins", "time_window_intervals", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
