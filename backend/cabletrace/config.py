"""
Configuration settings for the cable trace backend.
"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Cable Trace API"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./cabletrace.db"

    # Cable / landing datasets (GeoJSON)
    cables_path: str = "./data/cables.json"
    landings_path: str = "./data/landings.json"

    # Routing
    coordinate_precision: int = 3  # ~111m key resolution
    proximity_threshold_km: float = 50.0
    path_search_limit: int = 200_000  # DFS frame expansions before BFS fallback

    # Trace collection
    traceroute_command: str = "traceroute"
    traceroute_max_hops: int = 6
    traceroute_timeout: int = 120  # seconds
    geoip_url: str = "http://ip-api.com/json/{ip}"
    geoip_timeout: float = 5.0
    default_target: str = "openai.com"

    # Animation
    animation_steps: int = 40
    animation_frame_seconds: float = 0.02
    segment_pause_seconds: float = 0.3
    default_map_style: str = "streets"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="CABLETRACE_")


MAP_STYLES = {
    "light": {
        "label": "Light (Flat)",
        "style": "mapbox://styles/mapbox/light-v10",
        "projection": "mercator",
    },
    "dark": {
        "label": "Dark (Flat)",
        "style": "mapbox://styles/mapbox/dark-v10",
        "projection": "mercator",
    },
    "streets": {
        "label": "Streets (Flat)",
        "style": "mapbox://styles/mapbox/streets-v11",
        "projection": "mercator",
    },
    "satellite": {
        "label": "Satellite (Flat)",
        "style": "mapbox://styles/mapbox/satellite-v9",
        "projection": "mercator",
    },
    "outdoors": {
        "label": "Outdoors (Flat)",
        "style": "mapbox://styles/mapbox/outdoors-v11",
        "projection": "mercator",
    },
    "globe-streets": {
        "label": "3D Globe (Streets)",
        "style": "mapbox://styles/mapbox/streets-v12",
        "projection": "globe",
    },
}


# Global settings instance
settings = Settings()
