from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

from ..core.coordinates import CLASSROOM_LAT, CLASSROOM_LNG, TILE_DEGREES

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEOCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage Configuration
    database_url: str = Field(default="sqlite:///./py_geocache.db", description="SQLAlchemy URL of the save store")
    save_key: str = Field(default="savedGame", description="Well-known key the session is saved under")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., plain, json)")

    # World Configuration
    origin_lat: float = Field(default=CLASSROOM_LAT, description="Latitude of grid cell (0, 0)")
    origin_lng: float = Field(default=CLASSROOM_LNG, description="Longitude of grid cell (0, 0)")
    tile_degrees: float = Field(default=TILE_DEGREES, gt=0, description="Cell edge length in degrees")
    neighborhood_size: int = Field(default=19, ge=0, description="Half-width of the active window in cells")
    player_range: float = Field(default=5, gt=0, description="Interaction radius in cells")
    win_threshold: int = Field(default=64, ge=1, description="Held value that wins the game")
    value_profile: str = Field(default="classic", description="Cache value band preset")


# Instantiate singleton settings object
settings = Settings()
