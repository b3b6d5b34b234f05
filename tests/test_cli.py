"""Tests for the command line client."""

import json
import pytest
from unittest.mock import Mock

from estatemap_cli import EstateMapCli, build_parser, main

MARKERS = [
    {
        "id": 1, "title": "Harbor View", "price": 500000.0,
        "location": {"lat": 40.0, "lng": -73.0}, "category": "residential",
        "status": "for sale", "ownerName": "Dana Agent", "address": "1 Harbor Rd",
        "bedrooms": 3, "bathrooms": 2.0, "areaSqft": 1500.0,
    },
]


def _response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = json.dumps(payload)
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def cli(session):
    return EstateMapCli("http://api.test/api/v1/", session=session)


@pytest.mark.unit
def test_markers_prints_table(cli, session, capsys):
    session.get.return_value = _response(payload=MARKERS)

    assert cli.markers() is True

    session.get.assert_called_once_with("http://api.test/api/v1/map/properties", params=None)
    out = capsys.readouterr().out
    assert "Harbor View" in out
    assert "$500,000" in out
    assert "1 properties" in out


@pytest.mark.unit
def test_nearby_sends_parameters(cli, session, capsys):
    session.get.return_value = _response(payload=[dict(MARKERS[0], distance=0.0)])

    assert cli.nearby(40.0, -73.0, 2000) is True

    session.get.assert_called_once_with(
        "http://api.test/api/v1/map/nearby",
        params={"latitude": 40.0, "longitude": -73.0, "radius": 2000},
    )
    assert "Distance (km)" in capsys.readouterr().out


@pytest.mark.unit
def test_api_error_message_is_shown(cli, session, capsys):
    session.get.return_value = _response(400, {"error": "InvalidArgument",
                                               "message": "Latitude and longitude are required"})

    assert cli.nearby(40.0, -73.0) is False
    assert "Latitude and longitude are required" in capsys.readouterr().out


@pytest.mark.unit
def test_bounds_sentinel(cli, session, capsys):
    session.get.return_value = _response(payload={"minLat": 0, "maxLat": 0, "minLng": 0, "maxLng": 0})

    assert cli.bounds() is True
    assert "No properties with coordinates" in capsys.readouterr().out


@pytest.mark.unit
def test_unpriced_values_are_shown_as_na(cli, session, capsys):
    session.get.return_value = _response(payload=[{
        "location": {"lat": 40.0, "lng": -73.0}, "center": {"lat": 40.005, "lng": -72.995},
        "count": 1, "avgPrice": None, "categories": ["rental"],
    }])

    assert cli.clusters() is True
    assert "n/a" in capsys.readouterr().out


@pytest.mark.unit
def test_heatmap_saved_to_file(cli, session, tmp_path):
    points = [{"lat": 40.0, "lng": -73.0, "intensity": 5.0, "category": "residential"}]
    session.get.return_value = _response(payload=points)
    output = tmp_path / "heat.json"

    assert cli.heatmap(str(output)) is True
    assert json.loads(output.read_text()) == points


@pytest.mark.unit
def test_parser_route_defaults():
    args = build_parser().parse_args(["route", "a", "b"])
    assert (args.origin, args.destination, args.mode) == ("a", "b", "driving")


@pytest.mark.unit
def test_main_without_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


@pytest.mark.unit
def test_health_uses_root_path(cli, session, capsys):
    session.get.return_value = _response(503, {
        "status": "degraded",
        "services": {"database": {"status": "unhealthy"}, "directions": {"status": "configured"}},
    })

    assert cli.health() is False

    session.get.assert_called_once_with("http://api.test/health")
    out = capsys.readouterr().out
    assert "degraded" in out
    assert "database: unhealthy" in out
