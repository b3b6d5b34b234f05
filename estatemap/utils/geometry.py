"""Geometry utilities for map queries"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Iterable, Optional, Tuple
import math

from shapely.geometry import MultiPoint

# Meters in one degree of latitude at the equator
METERS_PER_DEGREE_LAT = 111320

# Mean Earth radius
EARTH_RADIUS_KM = 6371

# Clustering grid resolution: 100 cells per degree, ~1.1 km at the equator
GRID_CELLS_PER_DEGREE = 100

# Price that maps to heatmap intensity 1.0
HEATMAP_PRICE_DIVISOR = 100000

DEFAULT_RADIUS_METERS = 5000


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lng rectangle, edges inclusive"""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (self.min_lat <= lat <= self.max_lat
                and self.min_lng <= lng <= self.max_lng)

    def to_dict(self) -> Dict[str, float]:
        return {
            'minLat': self.min_lat,
            'maxLat': self.max_lat,
            'minLng': self.min_lng,
            'maxLng': self.max_lng
        }


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees"""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2) - math.radians(lon1)

    cos_angle = (math.cos(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)
                 + math.sin(lat1_rad) * math.sin(lat2_rad))

    # Rounding can push identical points just past 1.0
    cos_angle = max(-1.0, min(1.0, cos_angle))

    return EARTH_RADIUS_KM * math.acos(cos_angle)


def bounding_box(lat: float, lng: float, radius_meters: float) -> BoundingBox:
    """
    Approximate box around a point that contains every location within the radius.

    The longitude delta grows without bound near the poles; callers near
    +/-90 degrees get a box spanning most or all longitudes.
    """
    lat_delta = radius_meters / METERS_PER_DEGREE_LAT
    lng_delta = radius_meters / (METERS_PER_DEGREE_LAT * math.cos(math.radians(lat)))

    return BoundingBox(
        min_lat=lat - lat_delta,
        max_lat=lat + lat_delta,
        min_lng=lng - lng_delta,
        max_lng=lng + lng_delta
    )


def _grid_index(value: float) -> int:
    # Scale the decimal form so -73.01 is cell -7301, not -7302
    scaled = Decimal(repr(float(value))) * GRID_CELLS_PER_DEGREE
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def grid_cell(lat: float, lng: float) -> Tuple[int, int]:
    """Integer grid indices of the cell holding a point"""
    return _grid_index(lat), _grid_index(lng)


def cell_anchor(cell: Tuple[int, int]) -> Tuple[float, float]:
    """South-west corner of a grid cell, i.e. floor(v * 100) / 100 per axis"""
    return cell[0] / GRID_CELLS_PER_DEGREE, cell[1] / GRID_CELLS_PER_DEGREE


def cell_center(cell: Tuple[int, int]) -> Tuple[float, float]:
    """Midpoint of a grid cell"""
    return (cell[0] + 0.5) / GRID_CELLS_PER_DEGREE, (cell[1] + 0.5) / GRID_CELLS_PER_DEGREE


def enclosing_bounds(points: Iterable[Tuple[float, float]]) -> Optional[BoundingBox]:
    """Smallest box around (lat, lng) points, or None when there are none"""
    coords = [(lng, lat) for lat, lng in points]
    if not coords:
        return None

    min_x, min_y, max_x, max_y = MultiPoint(coords).bounds
    return BoundingBox(min_lat=min_y, max_lat=max_y, min_lng=min_x, max_lng=max_x)
