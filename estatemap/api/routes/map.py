"""Map data endpoints: markers, nearby search, clusters, heatmap, bounds, routes"""

from typing import Any, Callable
from flask import current_app, request
from flask_restx import Namespace, Resource, fields

from estatemap.config.settings import settings
from estatemap.services.geo_query_engine import NearbyQuery
from estatemap.services.property_repository import PropertyCategory
from estatemap.services.directions_client import TRAVEL_MODES

map_ns = Namespace("map", description="Map and geo query operations")

CATEGORIES = [category.value for category in PropertyCategory]

# Response models
location_model = map_ns.model("Location", {
    "lat": fields.Float(description="Latitude (WGS84 degrees)"),
    "lng": fields.Float(description="Longitude (WGS84 degrees)")
})

marker_model = map_ns.model("MapMarker", {
    "id": fields.Integer(description="Property id"),
    "title": fields.String(description="Listing title"),
    "price": fields.Float(description="Listing price, null when not set"),
    "location": fields.Nested(location_model),
    "category": fields.String(enum=CATEGORIES, description="Property category"),
    "status": fields.String(description="Listing status, e.g. 'for sale'"),
    "ownerName": fields.String(description="Name of the listing owner"),
    "address": fields.String(description="Street address"),
    "bedrooms": fields.Integer(),
    "bathrooms": fields.Float(),
    "areaSqft": fields.Float()
})

nearby_model = map_ns.inherit("NearbyMarker", marker_model, {
    "distance": fields.Float(description="Distance from the query point in kilometers")
})

cluster_model = map_ns.model("Cluster", {
    "location": fields.Nested(location_model, description="Grid cell anchor (floor to 0.01 degree)"),
    "center": fields.Nested(location_model, description="Grid cell midpoint"),
    "count": fields.Integer(description="Number of properties in the cell"),
    "avgPrice": fields.Float(description="Mean price of priced properties in the cell, null if none"),
    "categories": fields.List(fields.String, description="Distinct categories present")
})

heatmap_point_model = map_ns.model("HeatmapPoint", {
    "lat": fields.Float(),
    "lng": fields.Float(),
    "intensity": fields.Float(description="price / 100000, unclamped; null when unpriced"),
    "category": fields.String(enum=CATEGORIES)
})

bounds_model = map_ns.model("Bounds", {
    "minLat": fields.Float(),
    "maxLat": fields.Float(),
    "minLng": fields.Float(),
    "maxLng": fields.Float()
})

route_model = map_ns.model("Route", {
    "distance": fields.Raw(description="Leg distance {text, value}"),
    "duration": fields.Raw(description="Leg duration {text, value}"),
    "startAddress": fields.String(),
    "endAddress": fields.String(),
    "steps": fields.List(fields.Raw),
    "polyline": fields.Raw(description="Overview polyline {points}")
})

def _engine():
    return current_app.geo_engine

def _cached(key: str, compute: Callable[[], Any]) -> Any:
    """Serve from the response cache when enabled"""
    cache = current_app.cache
    value = cache.get(key)
    if value is None:
        value = compute()
        cache.set(key, value, timeout=settings.CACHE_TTL)
    return value

@map_ns.route("/properties")
class MapProperties(Resource):
    """Map markers endpoint"""

    @map_ns.doc("list_map_markers")
    @map_ns.response(200, "Success", [marker_model])
    def get(self):
        """Get every approved, geotagged property as a map marker"""
        return _cached("map:markers", lambda: _engine().list_map_markers())

@map_ns.route("/nearby")
class NearbyProperties(Resource):
    """Nearby search endpoint"""

    @map_ns.doc("find_nearby",
        params={
            'latitude': 'Query point latitude (required)',
            'longitude': 'Query point longitude (required)',
            'radius': 'Search radius in meters (default: 5000)',
        })
    @map_ns.response(200, "Success", [nearby_model])
    @map_ns.response(400, "Missing or invalid parameters")
    def get(self):
        """Find properties within a radius of a point, nearest first"""
        query = NearbyQuery.from_args(request.args)
        key = f"map:nearby:{query.latitude}:{query.longitude}:{query.radius_meters}"
        return _cached(key, lambda: _engine().find_nearby(query=query))

@map_ns.route("/clusters")
class PropertyClusters(Resource):
    """Grid clustering endpoint"""

    @map_ns.doc("compute_clusters")
    @map_ns.response(200, "Success", [cluster_model])
    def get(self):
        """Group properties into 0.01 degree grid cells"""
        return _cached("map:clusters", lambda: _engine().compute_clusters())

@map_ns.route("/heatmap")
class PropertyHeatmap(Resource):
    """Price heatmap endpoint"""

    @map_ns.doc("compute_heatmap")
    @map_ns.response(200, "Success", [heatmap_point_model])
    def get(self):
        """Get heatmap points weighted by price"""
        return _cached("map:heatmap", lambda: _engine().compute_heatmap())

@map_ns.route("/bounds")
class PropertyBounds(Resource):
    """Map bounds endpoint"""

    @map_ns.doc("compute_bounds")
    @map_ns.response(200, "Success (all zeros when there are no properties)", bounds_model)
    def get(self):
        """Get the box enclosing all properties, for map initialization"""
        return _cached("map:bounds", lambda: _engine().compute_bounds())

@map_ns.route("/route")
class RouteInfo(Resource):
    """Route information endpoint"""

    @map_ns.doc("get_route",
        params={
            'origin': 'Start address or "lat,lng" (required)',
            'destination': 'End address or "lat,lng" (required)',
            'mode': f"Travel mode: {', '.join(TRAVEL_MODES)} (default: driving)",
        })
    @map_ns.response(200, "Success", route_model)
    @map_ns.response(404, "No route found")
    @map_ns.response(502, "Directions API failure")
    def get(self):
        """Get route information between two places"""
        origin = request.args.get("origin", "").strip()
        destination = request.args.get("destination", "").strip()
        mode = request.args.get("mode", "driving").strip().lower()

        return current_app.directions_client.get_route(origin, destination, mode=mode)
