"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKING_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Order Tracking API"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    api_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the marketplace backend serving /orders/{id}/delivery-status.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token forwarded to the marketplace backend.",
    )
    status_timeout_seconds: float = Field(default=10.0, gt=0.0)
    poll_interval_seconds: float = Field(
        default=2.0,
        gt=0.0,
        description="Interval between delivery status polls.",
    )
    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv", "cycling", "walking"] = Field(
        default="driving",
        description="OSRM profile to use when computing routes.",
    )
    osrm_timeout_seconds: float = Field(default=10.0, gt=0.0)
    osrm_max_retries: int = Field(default=1, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    route_cache_precision: int = Field(
        default=4,
        ge=0,
        description="Decimal places used when comparing route endpoints (4 is roughly 11 m).",
    )
    route_cache_size: int = Field(default=16, ge=1)
    route_cache_ttl_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Re-fetch a cached route after this many seconds. Unset keeps routes for the session.",
    )
    eta_time_format: str = Field(default="%I:%M %p", description="strftime pattern for ETA clock times.")
    eta_timezone: str = Field(
        default="UTC",
        description="IANA zone ETA clock times are shown in (the customer's zone, e.g. Asia/Colombo).",
    )
    eta_placeholder: str = "Calculating..."
    eta_completion_qualifier: str = "(estimated arrival)"
    route_stroke_color: str = "#10B981"
    route_stroke_width: int = Field(default=5, ge=1)
    map_default_center: tuple[float, float] = Field(
        default=(7.8731, 80.7718),
        description="(lat, lon) used for the initial map region when no location is known yet.",
    )
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:8081",
            "http://127.0.0.1:8081",
            "http://localhost:19006",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("api_base_url", "osrm_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @field_validator("eta_timezone", mode="after")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value

    @field_validator("frontend_allowed_origins", mode="before")
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
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()


settings = Settings()
