import json

from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path


class Settings(BaseSettings):
    google_places_api_key: str = ""
    places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "openai/gpt-4o-mini"
    # Secondary model used for the single retry when the primary one fails
    fallback_model: str = "google/gemma-3-27b-it:free"
    llm_timeout: float = 60.0
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cache_ttl_seconds: int = 300
    # 0 means place details are refreshed on every view
    detail_refresh_seconds: int = 0
    nearby_radius_km: float = 50.0
    bounding_box_degrees: float = 0.5
    adaptive_bounding_box: bool = False
    search_radius_meters: int = 50000
    notification_limit: int = 10
    recommendation_limit: int = 5
    rate_limit_enabled: bool = True
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Accept JSON array or comma-separated string
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent / ".env"),
        "env_file_encoding": "utf-8",
    }


settings = Settings()
