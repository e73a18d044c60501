"""
Tunable parameters of the game world.

Cache values are drawn from a step function over [0, 1): each band covers
the interval from the previous band's upper bound to its own. The band table
is a property of the world, so two worlds with different tables are
different worlds even at the same coordinates.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List

from ..core.coordinates import CLASSROOM_LAT, CLASSROOM_LNG, TILE_DEGREES


class ValueBand(BaseModel):
    """One step of the value distribution."""

    model_config = {"frozen": True}

    upper: float = Field(..., gt=0.0, le=1.0, description="Exclusive upper bound of the band")
    value: int = Field(..., ge=0, description="Cache value produced by the band")


class WorldSettings(BaseModel):
    """Everything that shapes the procedural world."""

    origin_lat: float = Field(default=CLASSROOM_LAT, description="Latitude of grid cell (0, 0)")
    origin_lng: float = Field(default=CLASSROOM_LNG, description="Longitude of grid cell (0, 0)")
    tile_degrees: float = Field(default=TILE_DEGREES, gt=0, description="Cell edge length in degrees")
    neighborhood_size: int = Field(default=19, ge=0, description="Half-width of the active window in cells")
    player_range: float = Field(default=5, gt=0, description="Interaction radius in cells")
    win_threshold: int = Field(default=64, ge=1, description="Held value that wins the game")
    discriminator: str = Field(default="initialValue", description="Salt mixed into every cell seed")
    value_bands: List[ValueBand] = Field(
        default_factory=lambda: list(VALUE_PROFILES["classic"]),
        description="Value distribution, ordered by upper bound",
    )

    @field_validator("value_bands")
    @classmethod
    def check_bands(cls, bands: List[ValueBand]) -> List[ValueBand]:
        if not bands:
            raise ValueError("at least one value band is required")
        previous = 0.0
        for band in bands:
            if band.upper <= previous:
                raise ValueError("band upper bounds must be strictly increasing")
            previous = band.upper
        if previous != 1.0:
            raise ValueError("the last band must end at 1.0")
        return bands


# Band presets: classic is 70/15/10/5, generous is 30/40/20/10
VALUE_PROFILES: Dict[str, List[ValueBand]] = {
    "classic": [
        ValueBand(upper=0.70, value=0),
        ValueBand(upper=0.85, value=1),
        ValueBand(upper=0.95, value=2),
        ValueBand(upper=1.0, value=4),
    ],
    "generous": [
        ValueBand(upper=0.30, value=0),
        ValueBand(upper=0.70, value=1),
        ValueBand(upper=0.90, value=2),
        ValueBand(upper=1.0, value=4),
    ],
}


def get_value_profile(name: str) -> List[ValueBand]:
    """Look up a band preset by name."""
    if name not in VALUE_PROFILES:
        raise KeyError(f"Unknown value profile '{name}'. Available: {', '.join(VALUE_PROFILES)}")
    return list(VALUE_PROFILES[name])


def world_settings_from(app_settings, profile: str = None) -> WorldSettings:
    """Build world settings from the application settings."""
    return WorldSettings(
        origin_lat=app_settings.origin_lat,
        origin_lng=app_settings.origin_lng,
        tile_degrees=app_settings.tile_degrees,
        neighborhood_size=app_settings.neighborhood_size,
        player_range=app_settings.player_range,
        win_threshold=app_settings.win_threshold,
        value_bands=get_value_profile(profile or app_settings.value_profile),
    )
