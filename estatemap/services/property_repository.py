"""PostgreSQL-backed read access to map-visible properties"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
import time

import psycopg2
import structlog

from estatemap.database.connection_pool import DatabasePool, get_db_pool
from estatemap.utils.exceptions import RetrievalFailure
from estatemap.utils.geometry import BoundingBox

logger = structlog.get_logger(__name__)


class PropertyCategory(Enum):
    """Known listing categories"""
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    RENTAL = "rental"


@dataclass(frozen=True)
class MapProperty:
    """An approved property with a known location"""
    id: int
    title: str
    price: Optional[float]
    latitude: float
    longitude: float
    category: str
    status: Optional[str] = None
    owner_name: Optional[str] = None
    address: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    area_sqft: Optional[float] = None


# Only approved, geotagged rows are ever visible to map queries
GEOTAGGED_PROPERTIES_SQL = """
SELECT
    p.id,
    p.title,
    p.price,
    p.latitude,
    p.longitude,
    p.property_type,
    p.status,
    p.location,
    p.bedrooms,
    p.bathrooms,
    p.area_sqft,
    u.name AS owner_name
FROM properties p
LEFT JOIN users u ON p.user_id = u.id
WHERE p.is_approved = true
AND p.latitude IS NOT NULL
AND p.longitude IS NOT NULL
"""

BOUNDING_BOX_SQL = """
AND p.latitude BETWEEN %s AND %s
AND p.longitude BETWEEN %s AND %s
"""

ORDER_SQL = "ORDER BY p.id"


def _to_float(value: Any) -> Optional[float]:
    # psycopg2 returns NUMERIC columns as Decimal
    if value is None:
        return None
    return float(value)


def row_to_property(row: Dict[str, Any]) -> MapProperty:
    """Convert a RealDictCursor row to a MapProperty"""
    bedrooms = row.get('bedrooms')
    return MapProperty(
        id=row['id'],
        title=row.get('title'),
        price=_to_float(row.get('price')),
        latitude=_to_float(row['latitude']),
        longitude=_to_float(row['longitude']),
        category=row.get('property_type'),
        status=row.get('status'),
        owner_name=row.get('owner_name'),
        address=row.get('location'),
        bedrooms=int(bedrooms) if bedrooms is not None else None,
        bathrooms=_to_float(row.get('bathrooms')),
        area_sqft=_to_float(row.get('area_sqft'))
    )


class PropertyRepository:
    """Reads approved, geotagged properties from PostgreSQL"""

    def __init__(self, pool: Optional[DatabasePool] = None):
        self._pool = pool

    @property
    def pool(self) -> DatabasePool:
        if self._pool is None:
            self._pool = get_db_pool()
        return self._pool

    def fetch_geotagged(self, bbox: Optional[BoundingBox] = None) -> List[MapProperty]:
        """
        Fetch every approved property with coordinates.

        Args:
            bbox: Optional box; when given only rows inside it are returned

        Returns:
            List of MapProperty ordered by id
        """
        query = GEOTAGGED_PROPERTIES_SQL
        params: tuple = ()

        if bbox is not None:
            query += BOUNDING_BOX_SQL
            params = (bbox.min_lat, bbox.max_lat, bbox.min_lng, bbox.max_lng)

        query += ORDER_SQL

        start_time = time.time()
        try:
            rows = self.pool.execute_query(query, params)
        except psycopg2.Error as e:
            logger.error("Property query failed", error=str(e), bbox=bbox)
            raise RetrievalFailure(f"Error fetching properties: {str(e)}") from e

        properties = [row_to_property(row) for row in rows]

        logger.info("Fetched geotagged properties",
                    count=len(properties),
                    bbox=bbox is not None,
                    elapsed=round(time.time() - start_time, 3))
        return properties

    def ping(self) -> bool:
        """Check that the store answers a trivial query"""
        try:
            self.pool.execute_one("SELECT 1 AS ok")
            return True
        except psycopg2.Error as e:
            logger.warning("Property store health check failed", error=str(e))
            return False
