"""Map queries over approved, geotagged properties"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
import math
import statistics

import structlog

from estatemap.services.property_repository import MapProperty, PropertyRepository
from estatemap.utils.exceptions import InvalidArgument
from estatemap.utils.geometry import (
    DEFAULT_RADIUS_METERS,
    HEATMAP_PRICE_DIVISOR,
    BoundingBox,
    bounding_box,
    cell_anchor,
    cell_center,
    enclosing_bounds,
    grid_cell,
    haversine_km,
)

logger = structlog.get_logger(__name__)

# Returned by compute_bounds when no property qualifies
EMPTY_BOUNDS = BoundingBox(min_lat=0, max_lat=0, min_lng=0, max_lng=0)


def _parse_number(name: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a number, got {raw!r}")

    if not math.isfinite(value):
        raise InvalidArgument(f"{name} must be a finite number, got {raw!r}")
    return value


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


@dataclass(frozen=True)
class NearbyQuery:
    """Validated parameters for a nearby search"""
    latitude: float
    longitude: float
    radius_meters: float = DEFAULT_RADIUS_METERS

    def __post_init__(self):
        for name in ('latitude', 'longitude', 'radius_meters'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidArgument(f"{name} must be a finite number, got {value!r}")

        if not -90 <= self.latitude <= 90:
            raise InvalidArgument(f"latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise InvalidArgument(f"longitude must be between -180 and 180, got {self.longitude}")
        if self.radius_meters <= 0:
            raise InvalidArgument(f"radius must be positive, got {self.radius_meters}")

    @property
    def radius_km(self) -> float:
        return self.radius_meters / 1000

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "NearbyQuery":
        """Build from raw query-string values (latitude, longitude, radius)"""
        raw_lat = args.get('latitude')
        raw_lng = args.get('longitude')

        if _is_blank(raw_lat) or _is_blank(raw_lng):
            raise InvalidArgument("Latitude and longitude are required")

        raw_radius = args.get('radius')
        radius = (DEFAULT_RADIUS_METERS if _is_blank(raw_radius)
                  else _parse_number('radius', raw_radius))

        return cls(
            latitude=_parse_number('latitude', raw_lat),
            longitude=_parse_number('longitude', raw_lng),
            radius_meters=radius
        )


def _average_price(members: List[MapProperty]) -> Optional[float]:
    """Mean over priced members only; None when no member has a price"""
    prices = [p.price for p in members if p.price is not None]
    if not prices:
        return None
    return statistics.fmean(prices)


def marker(prop: MapProperty) -> Dict[str, Any]:
    """Map marker record for a property"""
    return {
        'id': prop.id,
        'title': prop.title,
        'price': prop.price,
        'location': {
            'lat': prop.latitude,
            'lng': prop.longitude
        },
        'category': prop.category,
        'status': prop.status,
        'ownerName': prop.owner_name,
        'address': prop.address,
        'bedrooms': prop.bedrooms,
        'bathrooms': prop.bathrooms,
        'areaSqft': prop.area_sqft
    }


class GeoQueryEngine:
    """Stateless geo queries; every call reads fresh rows from the repository"""

    def __init__(self, repository: Optional[PropertyRepository] = None):
        self.repository = repository or PropertyRepository()

    def list_map_markers(self) -> List[Dict[str, Any]]:
        """Marker for every approved, geotagged property"""
        return [marker(prop) for prop in self.repository.fetch_geotagged()]

    def find_nearby(self, latitude: Optional[float] = None,
                    longitude: Optional[float] = None,
                    radius_meters: float = DEFAULT_RADIUS_METERS,
                    query: Optional[NearbyQuery] = None) -> List[Dict[str, Any]]:
        """
        Properties within radius_meters of a point, nearest first.

        Candidates are narrowed with a bounding box in the store, then
        refined by exact haversine distance.

        Args:
            latitude: Query point latitude in degrees
            longitude: Query point longitude in degrees
            radius_meters: Search radius (default 5000)
            query: Already validated parameters; overrides the other arguments

        Returns:
            Marker records with an added 'distance' in kilometers
        """
        if query is None:
            if latitude is None or longitude is None:
                raise InvalidArgument("Latitude and longitude are required")
            query = NearbyQuery(latitude=latitude, longitude=longitude,
                                radius_meters=radius_meters)

        bbox = bounding_box(query.latitude, query.longitude, query.radius_meters)
        candidates = self.repository.fetch_geotagged(bbox=bbox)

        matches: List[Tuple[float, MapProperty]] = []
        for prop in candidates:
            distance = haversine_km(query.latitude, query.longitude,
                                    prop.latitude, prop.longitude)
            if distance <= query.radius_km:
                matches.append((distance, prop))

        matches.sort(key=lambda item: item[0])

        logger.info("Nearby search completed",
                    latitude=query.latitude,
                    longitude=query.longitude,
                    radius_meters=query.radius_meters,
                    candidates=len(candidates),
                    matches=len(matches))

        results = []
        for distance, prop in matches:
            record = marker(prop)
            record['distance'] = distance
            results.append(record)
        return results

    def compute_clusters(self) -> List[Dict[str, Any]]:
        """Group properties into fixed 0.01 degree grid cells"""
        cells: Dict[Tuple[int, int], List[MapProperty]] = defaultdict(list)
        for prop in self.repository.fetch_geotagged():
            cells[grid_cell(prop.latitude, prop.longitude)].append(prop)

        clusters = []
        for cell in sorted(cells):
            members = cells[cell]
            anchor_lat, anchor_lng = cell_anchor(cell)
            center_lat, center_lng = cell_center(cell)
            clusters.append({
                'location': {'lat': anchor_lat, 'lng': anchor_lng},
                'center': {'lat': center_lat, 'lng': center_lng},
                'count': len(members),
                'avgPrice': _average_price(members),
                'categories': sorted({p.category for p in members if p.category})
            })

        logger.info("Clusters computed", clusters=len(clusters))
        return clusters

    def compute_heatmap(self) -> List[Dict[str, Any]]:
        # Unclamped: prices above the divisor give intensity > 1.
        # Unpriced properties keep their point with a null intensity.
        return [
            {
                'lat': prop.latitude,
                'lng': prop.longitude,
                'intensity': (prop.price / HEATMAP_PRICE_DIVISOR
                              if prop.price is not None else None),
                'category': prop.category
            }
            for prop in self.repository.fetch_geotagged()
        ]

    def compute_bounds(self) -> Dict[str, float]:
        """Enclosing box of all properties; all zeros when there are none"""
        properties = self.repository.fetch_geotagged()
        bounds = enclosing_bounds((p.latitude, p.longitude) for p in properties)
        if bounds is None:
            return EMPTY_BOUNDS.to_dict()
        return bounds.to_dict()
