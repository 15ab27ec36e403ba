from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSelection(str, Enum):
    COMMERCIAL = "commercial"
    FREE = "free"


class Settings(BaseSettings):
    """
    Pydantic settings for the Cilok location toolkit.
    Values are automatically read from environment variables or a .env file.
    """
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # API settings
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=8003, env="API_PORT")

    # OpenRouter chat completions
    openrouter_api_key: Optional[str] = Field(default=None, env="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1", env="OPENROUTER_BASE_URL")
    ai_model: str = Field(default="google/gemini-2.0-flash-exp:free", env="AI_MODEL")
    ai_timeout: float = Field(default=60.0, env="AI_TIMEOUT")
    ai_max_attempts: int = Field(default=3, ge=1, env="AI_MAX_ATTEMPTS")

    # Map services. Without a Google Maps key the free OSM services are used.
    google_maps_api_key: Optional[str] = Field(default=None, env="GOOGLE_MAPS_API_KEY")
    google_maps_base_url: str = Field(default="https://maps.googleapis.com/maps/api", env="GOOGLE_MAPS_BASE_URL")
    mapbox_api_key: Optional[str] = Field(default=None, env="MAPBOX_API_KEY")
    nominatim_base_url: str = Field(default="https://nominatim.openstreetmap.org", env="NOMINATIM_BASE_URL")
    overpass_url: str = Field(default="https://overpass-api.de/api/interpreter", env="OVERPASS_URL")

    # Shared geocoding settings
    default_country: str = Field(default="ID", env="DEFAULT_COUNTRY")
    default_language: str = Field(default="id", env="DEFAULT_LANGUAGE")
    geocoding_user_agent: str = Field(
        default="Cilok Location Toolkit (https://github.com/Cloud-Dark/cilok)",
        env="GEOCODING_USER_AGENT",
    )
    http_timeout: float = Field(default=10.0, env="HTTP_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra='ignore'
    )


def resolve_provider_selection(config: Settings) -> ProviderSelection:
    """Picks the geocoding backend for the whole run from credential presence."""
    if config.google_maps_api_key:
        return ProviderSelection.COMMERCIAL
    return ProviderSelection.FREE


settings = Settings()
