"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BINROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Bin Collection Route Planner API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    data_root: Path = Field(default=Path("data"), description="Root directory for the file-backed store.")

    store_backend: Literal["file", "supabase"] = Field(
        default="file",
        description="Key-value medium shared by the client and driver front ends.",
    )
    store_key: str = Field(default="fullBins", description="Key under which pending bins are persisted.")

    truck_capacity_kg: float = Field(default=100.0, gt=0.0)
    depot_latitude: float = Field(default=6.902146919051226, ge=-90.0, le=90.0)
    depot_longitude: float = Field(default=79.86086322142651, ge=-180.0, le=180.0)

    routing_provider: Literal["google", "osrm"] = Field(
        default="google",
        description="Directions service used to order the pickups.",
    )
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Credential for the Google Directions and Geocoding APIs.",
    )
    google_maps_base_url: str = "https://maps.googleapis.com"
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing trips.",
    )
    http_timeout_seconds: float = Field(default=20.0, gt=0.0)

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
    supabase_table: str = Field(default="kv_store", description="Table holding key/value rows.")

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
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
