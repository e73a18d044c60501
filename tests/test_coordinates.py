"""Tests for the coordinate mapper."""

import pytest
from py_geocache.core.coordinates import (
    CLASSROOM_LAT, CLASSROOM_LNG, TILE_DEGREES, CellBounds, GridMapper, LatLng
)


class TestCellIndex:
    """Test position to cell conversion."""

    def setup_method(self):
        self.mapper = GridMapper()

    def test_origin_is_cell_zero(self):
        """The origin point falls in cell (0, 0)."""
        assert self.mapper.cell_index(CLASSROOM_LAT, CLASSROOM_LNG) == (0, 0)

    def test_points_in_same_cell(self):
        """Every point inside a cell maps back to that cell."""
        bounds = self.mapper.cell_bounds(12, -7)
        for fi in (0.05, 0.5, 0.95):
            for fj in (0.05, 0.5, 0.95):
                lat = bounds.lat_min + fi * TILE_DEGREES
                lng = bounds.lng_min + fj * TILE_DEGREES
                assert self.mapper.cell_index(lat, lng) == (12, -7)

    def test_boundary_neighbours_differ(self):
        """Points just either side of a cell edge land in adjacent cells."""
        bounds = self.mapper.cell_bounds(3, 3)
        eps = TILE_DEGREES * 0.01
        mid_lng = (bounds.lng_min + bounds.lng_max) / 2
        below = self.mapper.cell_index(bounds.lat_max - eps, mid_lng)
        above = self.mapper.cell_index(bounds.lat_max + eps, mid_lng)
        assert below == (3, 3)
        assert above == (4, 3)

    def test_negative_indices_floor(self):
        """Positions south-west of the origin floor to negative cells."""
        lat = CLASSROOM_LAT - 0.5 * TILE_DEGREES
        lng = CLASSROOM_LNG - 2.5 * TILE_DEGREES
        assert self.mapper.cell_index(lat, lng) == (-1, -3)

    def test_monotonic(self):
        """Moving north never decreases i."""
        lats = [CLASSROOM_LAT + k * TILE_DEGREES * 0.37 for k in range(-20, 20)]
        indices = [self.mapper.lat_to_i(lat) for lat in lats]
        assert indices == sorted(indices)


class TestCellBounds:
    """Test cell to bounds conversion."""

    def test_bounds_span_one_tile(self):
        mapper = GridMapper()
        bounds = mapper.cell_bounds(5, -2)
        assert bounds.lat_max - bounds.lat_min == pytest.approx(TILE_DEGREES)
        assert bounds.lng_max - bounds.lng_min == pytest.approx(TILE_DEGREES)
        assert bounds.lat_min == pytest.approx(CLASSROOM_LAT + 5 * TILE_DEGREES)
        assert bounds.lng_min == pytest.approx(CLASSROOM_LNG - 2 * TILE_DEGREES)

    def test_half_open(self):
        """Bounds include the lower edge and exclude the upper edge."""
        bounds = CellBounds(0.0, 0.0, 1.0, 1.0)
        assert bounds.contains(0.0, 0.0)
        assert not bounds.contains(1.0, 0.5)
        assert not bounds.contains(0.5, 1.0)

    def test_center_round_trip(self):
        mapper = GridMapper(origin=LatLng(10.0, 20.0), tile_degrees=0.5)
        center = mapper.cell_center(-4, 9)
        assert mapper.cell_index(*center) == (-4, 9)

    def test_rejects_bad_tile_size(self):
        with pytest.raises(ValueError):
            GridMapper(tile_degrees=0)
