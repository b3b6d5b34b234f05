"""Tests for distance, bounding box, grid and bounds helpers."""

import math
import pytest

from estatemap.utils.geometry import (
    EARTH_RADIUS_KM,
    METERS_PER_DEGREE_LAT,
    BoundingBox,
    bounding_box,
    cell_anchor,
    cell_center,
    enclosing_bounds,
    grid_cell,
    haversine_km,
)


@pytest.mark.unit
class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_km(40.0, -73.0, 40.0, -73.0) == pytest.approx(0.0, abs=1e-3)

    def test_identical_point_does_not_raise_domain_error(self):
        # cos/sin products can round just above 1.0 for some inputs
        for lat, lng in [(37.7749, -122.4194), (-33.8688, 151.2093), (51.5074, -0.1278)]:
            assert haversine_km(lat, lng, lat, lng) == pytest.approx(0.0, abs=1e-3)

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_KM * math.radians(1)
        assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected)

    def test_scenario_distance_is_about_1_4_km(self):
        distance = haversine_km(40.0, -73.0, 40.01, -73.01)
        assert 1.0 < distance < 2.0
        assert distance == pytest.approx(1.40, abs=0.02)

    def test_symmetric(self):
        a = haversine_km(48.8566, 2.3522, 52.52, 13.405)
        b = haversine_km(52.52, 13.405, 48.8566, 2.3522)
        assert a == pytest.approx(b)
        assert a == pytest.approx(878, abs=5)

    def test_antipodal_points(self):
        assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(EARTH_RADIUS_KM * math.pi)


@pytest.mark.unit
class TestBoundingBox:

    def test_deltas_at_equator(self):
        box = bounding_box(0.0, 0.0, 111320)
        assert box.min_lat == pytest.approx(-1.0)
        assert box.max_lat == pytest.approx(1.0)
        assert box.min_lng == pytest.approx(-1.0)
        assert box.max_lng == pytest.approx(1.0)

    def test_longitude_delta_widens_with_latitude(self):
        box = bounding_box(60.0, 10.0, 5000)
        lat_delta = 5000 / METERS_PER_DEGREE_LAT
        lng_delta = 5000 / (METERS_PER_DEGREE_LAT * math.cos(math.radians(60.0)))
        assert box.max_lat - 60.0 == pytest.approx(lat_delta)
        assert box.max_lng - 10.0 == pytest.approx(lng_delta)
        assert lng_delta == pytest.approx(2 * lat_delta)

    def test_contains_is_inclusive(self):
        box = BoundingBox(min_lat=1.0, max_lat=2.0, min_lng=3.0, max_lng=4.0)
        assert box.contains(1.0, 3.0)
        assert box.contains(2.0, 4.0)
        assert box.contains(1.5, 3.5)
        assert not box.contains(2.01, 3.5)
        assert not box.contains(1.5, 2.99)

    def test_to_dict_keys(self):
        box = BoundingBox(min_lat=1.0, max_lat=2.0, min_lng=3.0, max_lng=4.0)
        assert box.to_dict() == {"minLat": 1.0, "maxLat": 2.0, "minLng": 3.0, "maxLng": 4.0}


@pytest.mark.unit
class TestGrid:

    @pytest.mark.parametrize("lat, lng, expected", [
        (40.0, -73.0, (4000, -7300)),
        (40.01, -73.01, (4001, -7301)),
        (40.019, -73.001, (4001, -7301)),
        (-0.001, 0.001, (-1, 0)),
        (12.345, 67.899, (1234, 6789)),
    ])
    def test_grid_cell_floors_to_hundredths(self, lat, lng, expected):
        assert grid_cell(lat, lng) == expected

    def test_anchor_matches_floor_formula(self):
        assert cell_anchor((4001, -7301)) == (40.01, -73.01)

    def test_center_is_half_a_cell_from_anchor(self):
        lat, lng = cell_center((4000, -7301))
        assert lat == pytest.approx(40.005)
        assert lng == pytest.approx(-73.005)


@pytest.mark.unit
class TestEnclosingBounds:

    def test_empty_returns_none(self):
        assert enclosing_bounds([]) is None

    def test_single_point_is_degenerate_box(self):
        box = enclosing_bounds([(10.0, 20.0)])
        assert box == BoundingBox(min_lat=10.0, max_lat=10.0, min_lng=20.0, max_lng=20.0)

    def test_several_points(self):
        box = enclosing_bounds([(40.0, -73.0), (41.5, -74.2), (39.9, -72.5)])
        assert box.min_lat == 39.9
        assert box.max_lat == 41.5
        assert box.min_lng == -74.2
        assert box.max_lng == -72.5

    def test_accepts_generator(self):
        box = enclosing_bounds((lat, lng) for lat, lng in [(1.0, 2.0), (3.0, 4.0)])
        assert box.to_dict() == {"minLat": 1.0, "maxLat": 3.0, "minLng": 2.0, "maxLng": 4.0}
