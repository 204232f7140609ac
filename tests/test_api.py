from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from conftest import geocode_result, leg, matrix_row
from geointel.api import dependencies
from geointel.exceptions import ServiceUnavailable
from geointel.main import create_app
from geointel.services.addresses import AddressResolver
from geointel.services.geofencing import GeofenceEngine
from geointel.services.health import HealthMonitor
from geointel.services.hotspots import DBSCANClusterer
from geointel.services.routing.engine import RouteEngine

SQUARE = [
    {"lat": 0, "lng": 0},
    {"lat": 0, "lng": 1},
    {"lat": 1, "lng": 1},
    {"lat": 1, "lng": 0},
    {"lat": 0, "lng": 0},
]


@pytest.fixture
def api_client(provider) -> TestClient:
    app = create_app()
    geofence_engine = GeofenceEngine(provider, clusterer=DBSCANClusterer(eps_meters=500, min_points=3))
    app.dependency_overrides[dependencies.get_address_resolver] = lambda: AddressResolver(provider)
    app.dependency_overrides[dependencies.get_route_engine] = lambda: RouteEngine(provider)
    app.dependency_overrides[dependencies.get_geofence_engine] = lambda: geofence_engine
    app.dependency_overrides[dependencies.get_health_monitor] = lambda: HealthMonitor(
        {"geofence_engine": geofence_engine.check_health}, interval_seconds=0
    )
    return TestClient(app)


def test_root_and_health(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}

    report = api_client.get("/api/health/services").json()
    assert report["status"] == "healthy"
    assert report["services"] == {"geofence_engine": "healthy"}


def test_validate_address(api_client: TestClient, provider):
    provider.geocode_responses["10 Kamuzu Road"] = [geocode_result("10 Kamuzu Road, Lilongwe", -13.96, 33.77)]

    response = api_client.post("/api/addresses/validate", json={"address": "10 Kamuzu Road", "country_code": "MWI"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "VALID"
    assert body["confidence"] == "HIGH"
    assert body["coordinate"] == {"lat": -13.96, "lng": 33.77}


def test_unsupported_region_is_bad_request(api_client: TestClient, provider):
    response = api_client.post("/api/addresses/validate", json={"address": "x", "country_code": "ZZ"})

    assert response.status_code == 400
    assert response.json()["error"] == "UnsupportedRegion"
    assert provider.calls == []


def test_resolve_without_match_is_unprocessable(api_client: TestClient):
    response = api_client.post("/api/addresses/resolve", json={"address": "Nowhere", "country_code": "MWI"})

    assert response.status_code == 422
    assert response.json()["suggestions"] == []


def test_batch_validation(api_client: TestClient, provider):
    provider.geocode_responses["a"] = [geocode_result("A Rd", -13.9, 33.7)]
    provider.geocode_responses["b"] = ServiceUnavailable("timeout")

    response = api_client.post(
        "/api/addresses/validate/batch", json={"addresses": ["a", "b"], "country_code": "MW"}
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert [item["success"] for item in results] == [True, False]


def test_reverse_geocode_not_found(api_client: TestClient):
    response = api_client.post("/api/addresses/reverse", json={"lat": 1, "lng": 2})

    assert response.status_code == 404


def test_provider_outage_is_service_unavailable(api_client: TestClient, provider):
    provider.directions_results = ServiceUnavailable("timeout")

    response = api_client.post("/api/routes/calculate", json={"origin": "A", "destination": "B"})

    assert response.status_code == 503


def test_calculate_route(api_client: TestClient, provider):
    provider.directions_results = [{"legs": [leg(1000, 60, (0, 0), (0, 0.01))], "overview_polyline": {"points": ""}}]

    response = api_client.post(
        "/api/routes/calculate", json={"origin": {"lat": 0, "lng": 0}, "destination": "Shop"}
    )

    assert response.status_code == 200
    assert response.json()["distance_m"] == 1000


def test_optimize_deliveries_with_weight_override(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={
            "driver_location": {"lat": 0, "lng": 0},
            "deliveries": [
                {"id": "standard", "location": {"lat": 0, "lng": 0.01}},
                {"id": "premium", "location": {"lat": 0, "lng": -0.02}, "customer_tier": "premium"},
            ],
            "weights": {"premium_bonus": 0},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [stop["stop_id"] for stop in body["stops"]] == ["standard", "premium"]
    assert body["refined"] is False


def test_time_windows(api_client: TestClient, provider):
    provider.matrix_by_hour = {8: matrix_row(2400), 12: matrix_row(1500), 18: matrix_row(3300), 22: matrix_row(1800)}

    response = api_client.post("/api/routes/time-windows", json={"origin": "Depot", "destinations": ["Shop"]})

    assert response.status_code == 200
    assert response.json()["optimal_window"] == "midday"


def test_geofence_lifecycle(api_client: TestClient):
    created = api_client.post("/api/geofences", json={"name": "Depot", "coordinates": SQUARE})
    assert created.status_code == 201
    geofence = created.json()
    assert geofence["center"] == {"lat": 0.5, "lng": 0.5}
    assert geofence["area"] == 1.0

    inside = api_client.post(f"/api/geofences/{geofence['id']}/contains", json={"point": {"lat": 0.5, "lng": 0.5}})
    assert inside.json()["inside"] is True

    updated = api_client.put(
        f"/api/geofences/{geofence['id']}",
        json={"name": "Depot v2", "coordinates": SQUARE, "expected_version": 1},
    )
    assert updated.json()["version"] == 2

    feature_collection = api_client.get("/api/geofences/geojson").json()
    assert len(feature_collection["features"]) == 1

    assert api_client.delete(f"/api/geofences/{geofence['id']}").json()["active"] is False
    assert api_client.get(f"/api/geofences/{geofence['id']}").status_code == 404


def test_invalid_geofence_is_bad_request(api_client: TestClient):
    response = api_client.post("/api/geofences", json={"name": "Open", "coordinates": SQUARE[:-1]})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidGeometry"


def test_hotspot_analysis(api_client: TestClient):
    history = [
        {"location": {"lat": 0.5 + i * 0.001, "lng": 0.5}, "timestamp": f"2024-05-01T0{i}:00:00+00:00"}
        for i in range(4)
    ]

    response = api_client.post(
        "/api/hotspots/analyze",
        json={"delivery_history": history, "timeframe": "daily", "include_geojson": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total_records"] == 4
    assert len(body["clusters"]) == 1
    assert body["clusters"][0]["popular_times"][:4] == [1, 1, 1, 1]
    assert body["geojson"]["type"] == "FeatureCollection"


def test_hotspot_analysis_with_mixed_timestamps(api_client: TestClient):
    history = [
        {"location": {"lat": 0.5, "lng": 0.5}, "timestamp": "2024-05-01T09:00:00+02:00"},
        {"location": {"lat": 0.501, "lng": 0.5}, "timestamp": "2024-05-01T08:00:00"},
        {"location": {"lat": 0.502, "lng": 0.5}, "timestamp": "2024-04-30T08:00:00"},
    ]

    response = api_client.post("/api/hotspots/analyze", json={"delivery_history": history, "timeframe": "weekly"})

    assert response.status_code == 200
    assert response.json()["total_records"] == 3


@pytest.fixture
def keyless_client(monkeypatch) -> Iterator[TestClient]:
    from geointel.config import settings

    monkeypatch.setattr(settings, "maps_api_key", None)
    dependencies._maps_client.cache_clear()
    yield TestClient(create_app())
    dependencies._maps_client.cache_clear()


def test_optimize_without_maps_key(keyless_client: TestClient):
    payload = {
        "driver_location": {"lat": 0, "lng": 0},
        "deliveries": [{"id": "only", "location": {"lat": 0, "lng": 0.01}}],
    }

    response = keyless_client.post("/api/routes/optimize", json=payload)
    assert response.status_code == 200
    assert [stop["stop_id"] for stop in response.json()["stops"]] == ["only"]

    refined = keyless_client.post("/api/routes/optimize", json={**payload, "refine_with_provider": True})
    assert refined.status_code == 503

    route = keyless_client.post("/api/routes/calculate", json={"origin": "A", "destination": "B"})
    assert route.status_code == 503
