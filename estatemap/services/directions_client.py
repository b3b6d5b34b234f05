"""Google Directions API client for route information between two places"""

import httpx
from typing import Any, Dict, Optional
import structlog

from estatemap.config.settings import settings
from estatemap.utils.exceptions import (
    ConfigurationError,
    DirectionsAPIError,
    InvalidArgument,
    NotFound,
)

logger = structlog.get_logger(__name__)

TRAVEL_MODES = ("driving", "walking", "bicycling", "transit")

class DirectionsClient:
    """Client for the Google Directions JSON API"""

    DIRECTIONS_API_URL = "https://maps.googleapis.com/maps/api/directions/json"

    def __init__(self, api_key: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        """Initialize directions client"""
        self.api_key = api_key or settings.GOOGLE_MAPS_API_KEY
        self.session = httpx.Client(
            timeout=settings.DIRECTIONS_TIMEOUT,
            headers={
                "User-Agent": "Estate Map API",
                "Accept": "application/json"
            },
            transport=transport
        )

    def get_route(self, origin: Optional[str], destination: Optional[str],
                  mode: str = "driving") -> Dict[str, Any]:
        """
        Get route information between two places

        Args:
            origin: Address or "lat,lng" of the start
            destination: Address or "lat,lng" of the end
            mode: One of driving, walking, bicycling, transit

        Returns:
            First leg of the first route: distance, duration, addresses,
            steps and the overview polyline
        """
        if not origin or not destination:
            raise InvalidArgument("Origin and destination are required")

        if mode not in TRAVEL_MODES:
            raise InvalidArgument(
                f"Invalid mode '{mode}', expected one of: {', '.join(TRAVEL_MODES)}"
            )

        if not self.api_key:
            raise ConfigurationError("GOOGLE_MAPS_API_KEY is not configured")

        logger.info("Requesting route", origin=origin, destination=destination, mode=mode)

        data = self._make_request({
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "key": self.api_key
        })

        routes = data.get("routes") or []
        if not routes or not routes[0].get("legs"):
            logger.info("No route found", origin=origin, destination=destination,
                        api_status=data.get("status"))
            raise NotFound("No route found")

        route = routes[0]
        leg = route["legs"][0]

        return {
            "distance": leg.get("distance"),
            "duration": leg.get("duration"),
            "startAddress": leg.get("start_address"),
            "endAddress": leg.get("end_address"),
            "steps": leg.get("steps", []),
            "polyline": route.get("overview_polyline")
        }

    def _make_request(self, params: Dict[str, str]) -> Dict[str, Any]:
        """Call the API and decode the JSON body"""
        try:
            response = self.session.get(self.DIRECTIONS_API_URL, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Directions API returned error status",
                         status_code=e.response.status_code)
            raise DirectionsAPIError(
                f"Directions API returned status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Directions API request failed", error=str(e))
            raise DirectionsAPIError(f"Directions API request failed: {str(e)}") from e
        except ValueError as e:
            logger.error("Directions API returned invalid JSON", error=str(e))
            raise DirectionsAPIError("Directions API returned invalid JSON") from e

    def close(self):
        """Close the underlying HTTP session"""
        self.session.close()
