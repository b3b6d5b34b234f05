#!/usr/bin/env python3
"""Estate Map command line interface for quick map queries"""

import argparse
import json
from typing import Any, Dict, List, Optional
import requests
from tabulate import tabulate

# Default API endpoint
DEFAULT_API_URL = "http://localhost:5000/api/v1"

def _money(value: Optional[float]) -> str:
    return f"${value:,.0f}" if value is not None else "n/a"

def _round(value: Optional[float], digits: int = 3) -> Any:
    return round(value, digits) if value is not None else "n/a"

class EstateMapCli:
    """Command line interface for the estate map API"""

    def __init__(self, api_url: str = DEFAULT_API_URL, session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip('/')
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self.session.get(f"{self.api_url}{path}", params=params)
        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise requests.HTTPError(f"{response.status_code}: {message}", response=response)
        return response.json()

    def markers(self) -> bool:
        """List every property on the map"""
        print("🗺️  Map markers\n")
        try:
            data = self._get("/map/properties")
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        print(self._marker_table(data))
        print(f"\n{len(data)} properties")
        return True

    def nearby(self, latitude: float, longitude: float, radius: float = 5000) -> bool:
        """Properties near a point"""
        print(f"📍 Within {radius:.0f} m of ({latitude}, {longitude})\n")
        try:
            data = self._get("/map/nearby", params={
                "latitude": latitude,
                "longitude": longitude,
                "radius": radius
            })
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        if not data:
            print("No properties found")
            return True

        print(self._marker_table(data, with_distance=True))
        return True

    def clusters(self) -> bool:
        """Grid clusters"""
        print("🧩 Property clusters\n")
        try:
            data = self._get("/map/clusters")
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        rows = [
            [c["location"]["lat"], c["location"]["lng"], c["count"],
             _money(c["avgPrice"]), ", ".join(c["categories"])]
            for c in data
        ]
        print(tabulate(rows, headers=["Lat", "Lng", "Count", "Avg Price", "Categories"]))
        return True

    def heatmap(self, output: Optional[str] = None) -> bool:
        """Heatmap points, optionally saved as JSON"""
        try:
            data = self._get("/map/heatmap")
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        if output:
            with open(output, 'w') as f:
                json.dump(data, f, indent=2)
            print(f"📁 {len(data)} heatmap points saved to: {output}")
        else:
            rows = [[p["lat"], p["lng"], _round(p["intensity"]), p["category"]] for p in data]
            print(tabulate(rows, headers=["Lat", "Lng", "Intensity", "Category"]))
        return True

    def bounds(self) -> bool:
        """Bounding box of all properties"""
        try:
            data = self._get("/map/bounds")
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        if not any(data.values()):
            print("No properties with coordinates")
            return True

        print(f"Latitude:  {data['minLat']} .. {data['maxLat']}")
        print(f"Longitude: {data['minLng']} .. {data['maxLng']}")
        return True

    def health(self) -> bool:
        """Service health; served outside the API prefix"""
        base_url = self.api_url.split("/api/")[0]
        try:
            response = self.session.get(f"{base_url}/health")
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            print(f"❌ Error: {str(e)}")
            return False

        print(f"Status: {data.get('status')}")
        for name, service in data.get("services", {}).items():
            print(f"  {name}: {service.get('status')}")
        return response.status_code == 200

    def route(self, origin: str, destination: str, mode: str = "driving") -> bool:
        """Route between two places"""
        print(f"🚗 {origin} → {destination} ({mode})\n")
        try:
            data = self._get("/map/route", params={
                "origin": origin,
                "destination": destination,
                "mode": mode
            })
        except requests.RequestException as e:
            print(f"❌ Error: {str(e)}")
            return False

        print(f"  Distance: {(data.get('distance') or {}).get('text', '?')}")
        print(f"  Duration: {(data.get('duration') or {}).get('text', '?')}")
        print(f"  From: {data.get('startAddress')}")
        print(f"  To:   {data.get('endAddress')}")
        return True

    @staticmethod
    def _marker_table(markers: List[Dict[str, Any]], with_distance: bool = False) -> str:
        headers = ["ID", "Title", "Price", "Category", "Status", "Lat", "Lng"]
        if with_distance:
            headers.append("Distance (km)")

        rows = []
        for m in markers:
            row = [m["id"], m["title"], _money(m["price"]), m["category"], m["status"],
                   m["location"]["lat"], m["location"]["lng"]]
            if with_distance:
                row.append(round(m["distance"], 3))
            rows.append(row)
        return tabulate(rows, headers=headers)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estate Map API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  estatemap markers
  estatemap nearby 40.0 -73.0 --radius 2000
  estatemap clusters
  estatemap heatmap --output heat.json
  estatemap bounds
  estatemap health
  estatemap route "Times Square, NY" "JFK Airport" --mode transit
        """
    )

    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help="API endpoint URL"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("markers", help="List every property on the map")

    nearby_parser = subparsers.add_parser("nearby", help="Find properties near a point")
    nearby_parser.add_argument("latitude", type=float)
    nearby_parser.add_argument("longitude", type=float)
    nearby_parser.add_argument("--radius", type=float, default=5000, help="Radius in meters")

    subparsers.add_parser("clusters", help="Show grid clusters")

    heatmap_parser = subparsers.add_parser("heatmap", help="Show heatmap points")
    heatmap_parser.add_argument("--output", help="Save points to a JSON file")

    subparsers.add_parser("bounds", help="Show the bounds of all properties")

    subparsers.add_parser("health", help="Check service health")

    route_parser = subparsers.add_parser("route", help="Route between two places")
    route_parser.add_argument("origin")
    route_parser.add_argument("destination")
    route_parser.add_argument("--mode", choices=["driving", "walking", "bicycling", "transit"],
                              default="driving")

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = EstateMapCli(args.api_url)

    if args.command == "markers":
        ok = cli.markers()
    elif args.command == "nearby":
        ok = cli.nearby(args.latitude, args.longitude, args.radius)
    elif args.command == "clusters":
        ok = cli.clusters()
    elif args.command == "heatmap":
        ok = cli.heatmap(args.output)
    elif args.command == "bounds":
        ok = cli.bounds()
    elif args.command == "health":
        ok = cli.health()
    elif args.command == "route":
        ok = cli.route(args.origin, args.destination, args.mode)
    else:
        parser.print_help()
        return 1

    return 0 if ok else 1

if __name__ == "__main__":
    raise SystemExit(main())
