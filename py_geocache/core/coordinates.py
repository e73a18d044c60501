"""
Mapping between geographic positions and the discrete cell grid.

The grid is infinite and anchored at a fixed origin. Cell (i, j) covers the
half-open box [origin.lat + i*tile, origin.lat + (i+1)*tile) by
[origin.lng + j*tile, origin.lng + (j+1)*tile).
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

# Our classroom location
CLASSROOM_LAT = 36.997936938057016
CLASSROOM_LNG = -122.05703507501151

TILE_DEGREES = 1e-4


class LatLng(NamedTuple):
    """A geographic position in degrees."""
    lat: float
    lng: float


class CellBounds(NamedTuple):
    """Geographic extent of one cell."""
    lat_min: float
    lng_min: float
    lat_max: float
    lng_max: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.lat_min <= lat < self.lat_max and self.lng_min <= lng < self.lng_max


@dataclass(frozen=True)
class GridMapper:
    """Converts positions to cell indices and back."""

    origin: LatLng = LatLng(CLASSROOM_LAT, CLASSROOM_LNG)
    tile_degrees: float = TILE_DEGREES

    def __post_init__(self):
        if not self.tile_degrees > 0:
            raise ValueError(f"tile_degrees must be positive, got {self.tile_degrees}")

    def lat_to_i(self, lat: float) -> int:
        return math.floor((lat - self.origin.lat) / self.tile_degrees)

    def lng_to_j(self, lng: float) -> int:
        return math.floor((lng - self.origin.lng) / self.tile_degrees)

    def cell_index(self, lat: float, lng: float) -> Tuple[int, int]:
        """Return the (i, j) of the cell containing the position."""
        return self.lat_to_i(lat), self.lng_to_j(lng)

    def cell_bounds(self, i: int, j: int) -> CellBounds:
        """Return the geographic box covered by cell (i, j)."""
        tile = self.tile_degrees
        return CellBounds(
            lat_min=self.origin.lat + i * tile,
            lng_min=self.origin.lng + j * tile,
            lat_max=self.origin.lat + (i + 1) * tile,
            lng_max=self.origin.lng + (j + 1) * tile,
        )

    def cell_center(self, i: int, j: int) -> LatLng:
        bounds = self.cell_bounds(i, j)
        return LatLng(
            (bounds.lat_min + bounds.lat_max) / 2,
            (bounds.lng_min + bounds.lng_max) / 2,
        )

    def step(self, position: LatLng, d_lat: int, d_lng: int) -> LatLng:
        """Offset a position by whole tiles."""
        return LatLng(
            position.lat + d_lat * self.tile_degrees,
            position.lng + d_lng * self.tile_degrees,
        )
