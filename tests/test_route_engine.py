from datetime import datetime, timedelta, timezone

import pytest

from conftest import leg, matrix_row
from geointel.exceptions import RouteNotFound, ServiceUnavailable
from geointel.models.domain import Coordinate, DeliveryStop
from geointel.services.routing.engine import RouteEngine, build_route
from geointel.services.routing.models import DestinationEstimate, RouteRequest
from geointel.services.routing.time_windows import (
    classify_traffic,
    next_departure,
    select_optimal_window,
)

NOW = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class RecordingCache:
    def __init__(self):
        self.reports = []

    def store(self, report):
        self.reports.append(report)


@pytest.fixture
def engine(provider) -> RouteEngine:
    return RouteEngine(provider, max_parallel_requests=4, cache=RecordingCache())


def _route_payload(*legs: dict, polyline: str = "_p~iF~ps|U_ulLnnqC") -> dict:
    return {"legs": list(legs), "overview_polyline": {"points": polyline}, "waypoint_order": [0]}


def test_build_route_sums_legs_and_cleans_steps():
    payload = _route_payload(
        leg(
            1200,
            300,
            (0, 0),
            (0, 0.01),
            steps=[
                {
                    "html_instructions": "Head <b>north</b> on <div>Main St</div>",
                    "distance": {"value": 1200},
                    "duration": {"value": 300},
                    "start_location": {"lat": 0, "lng": 0},
                }
            ],
        ),
        leg(800, 120, (0, 0.01), (0, 0.02)),
    )

    route = build_route(payload, "best_guess")

    assert route.distance_m == 2000
    assert route.duration_s == 420
    assert route.distance_text == "2.0 km"
    assert route.duration_text == "7 mins"
    assert route.origin == Coordinate(0, 0)
    assert route.destination == Coordinate(0, 0.02)
    assert route.waypoints == [Coordinate(0, 0.01)]
    assert route.steps[0].instruction == "Head north on Main St"
    assert route.path[0] == Coordinate(38.5, -120.2)
    assert route.traffic_model == "best_guess"


def test_build_route_without_legs():
    with pytest.raises(RouteNotFound):
        build_route({"legs": []})


def test_calculate_route_optimizes_waypoints(engine, provider):
    provider.directions_results = [_route_payload(leg(1000, 60, (0, 0), (0, 0.01)), leg(1000, 60, (0, 0.01), (0, 0.02)))]

    route = engine.calculate_route("A", "C", ["B"])

    assert route.distance_m == 2000
    assert provider.calls == [("directions", ("A", "C", ["B"], True))]
    assert route.traffic_model is None


def test_calculate_route_not_found(engine, provider):
    with pytest.raises(RouteNotFound):
        engine.calculate_route("A", "Z")


def test_calculate_route_rejects_too_many_waypoints(engine):
    with pytest.raises(ValueError):
        engine.calculate_route("A", "B", [f"W{index}" for index in range(26)])


def test_routes_batch_reports_errors_per_item(engine, provider):
    def _directions(origin, destination):
        if destination == "nowhere":
            return []
        return [_route_payload(leg(500, 30, (0, 0), (0, 0.005)))]

    provider.directions_results = _directions

    items = engine.calculate_routes_batch(
        [RouteRequest("A", "B"), RouteRequest("A", "nowhere"), RouteRequest("B", "A")]
    )

    assert [item.index for item in items] == [0, 1, 2]
    assert [item.success for item in items] == [True, False, True]
    assert "No route found" in items[1].error


def test_refinement_replaces_straight_line_legs(engine, provider):
    stops = [DeliveryStop("s1", Coordinate(0, 0.01)), DeliveryStop("s2", Coordinate(0, 0.02))]
    provider.directions_results = [
        _route_payload(leg(1500, 120, (0, 0), (0, 0.01)), leg(2500, 180, (0, 0.01), (0, 0.02)))
    ]

    result = engine.optimize_multiple_deliveries(
        Coordinate(0, 0), stops, now=NOW, refine_with_provider=True
    )

    assert result.refined
    assert result.total_distance_km == pytest.approx(4.0)
    assert result.total_duration_min == pytest.approx(5.0)
    assert [item.leg_distance_km for item in result.stops] == [1.5, 2.5]
    _, (origin, destination, waypoints, optimize) = provider.calls[-1]
    assert (origin, destination, waypoints, optimize) == (Coordinate(0, 0), Coordinate(0, 0.02), [Coordinate(0, 0.01)], False)


def test_refinement_failure_keeps_estimates(engine, provider):
    stops = [DeliveryStop("s1", Coordinate(0, 0.01))]
    provider.directions_results = ServiceUnavailable("quota")

    result = engine.optimize_multiple_deliveries(
        Coordinate(0, 0), stops, now=NOW, refine_with_provider=True
    )

    assert not result.refined
    assert result.refinement_error == "quota"
    assert result.total_distance_km == pytest.approx(1.11, rel=0.01)


def test_engine_without_provider_orders_by_coordinates_only():
    engine = RouteEngine()
    stops = [DeliveryStop("s1", Coordinate(0, 0.01))]

    result = engine.optimize_multiple_deliveries(Coordinate(0, 0), stops, now=NOW)

    assert [item.stop.id for item in result.stops] == ["s1"]
    with pytest.raises(ServiceUnavailable):
        engine.optimize_multiple_deliveries(Coordinate(0, 0), stops, now=NOW, refine_with_provider=True)
    with pytest.raises(ServiceUnavailable):
        engine.calculate_route("A", "B")
    with pytest.raises(ServiceUnavailable):
        engine.calculate_routes_batch([RouteRequest("A", "B")])
    with pytest.raises(ServiceUnavailable):
        engine.calculate_delivery_time_windows("Depot", ["Shop"], now=NOW)


def test_time_windows_pick_lowest_average(engine, provider):
    provider.matrix_by_hour = {
        8: matrix_row(40 * 60),
        12: matrix_row(25 * 60),
        18: matrix_row(55 * 60),
        22: matrix_row(30 * 60),
    }

    report = engine.calculate_delivery_time_windows("Depot", ["Shop"], now=NOW)

    assert report.optimal_window == "midday"
    assert report.min_average_duration == 25 * 60
    assert not report.partial
    assert [window.interval for window in report.windows] == ["morning", "midday", "evening", "night"]
    assert engine.cache.reports == [report]


def test_time_windows_partial_results(engine, provider):
    provider.matrix_by_hour = {
        8: matrix_row(600, None),
        12: matrix_row(900, 300),
        18: matrix_row(1200, 1200),
    }

    report = engine.calculate_delivery_time_windows("Depot", ["A", "B"], now=NOW)

    morning, midday, evening, night = report.windows
    assert morning.estimated_duration == 600
    assert morning.failed_destinations == ["B"]
    assert midday.estimated_duration == 600
    assert night.estimated_duration is None
    assert night.failed_destinations == ["A", "B"]
    assert night.error
    # morning and midday tie; the earlier interval wins
    assert report.optimal_window == "morning"
    assert report.partial


def test_time_windows_all_failed(engine, provider):
    with pytest.raises(ServiceUnavailable):
        engine.calculate_delivery_time_windows("Depot", ["A"], now=NOW)
    assert engine.cache.reports == []


def test_next_departure_rolls_to_tomorrow():
    assert next_departure("morning", NOW) == datetime(2024, 5, 2, 8, tzinfo=timezone.utc)
    assert next_departure("midday", NOW) == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        next_departure("brunch", NOW)


def test_next_departure_uses_reference_timezone():
    blantyre = timezone(timedelta(hours=2))
    local_now = datetime(2024, 5, 1, 9, 30, tzinfo=blantyre)

    assert next_departure("midday", local_now) == datetime(2024, 5, 1, 12, tzinfo=blantyre)
    assert next_departure("midday", local_now).astimezone(timezone.utc).hour == 10
    assert next_departure("morning", datetime(2024, 5, 1, 9, 30)) == datetime(2024, 5, 2, 8, tzinfo=timezone.utc)


def test_classify_traffic_levels():
    def _estimate(free, in_traffic):
        return DestinationEstimate("d", "OK", duration_s=free, duration_in_traffic_s=in_traffic)

    assert classify_traffic([_estimate(100, 105)])["level"] == "light"
    assert classify_traffic([_estimate(100, 120)])["level"] == "moderate"
    assert classify_traffic([_estimate(100, 150)])["level"] == "heavy"
    assert classify_traffic([])["level"] == "unknown"


def test_select_optimal_window_skips_missing():
    assert select_optimal_window({"morning": None, "midday": 50.0, "evening": 40.0}) == ("evening", 40.0)
    assert select_optimal_window({"morning": None}) == (None, None)


def test_unknown_interval_rejected(provider):
    with pytest.raises(ValueError):
        RouteEngine(provider, intervals=["brunch"])


def test_check_health(engine, provider):
    assert engine.check_health() == "unhealthy"
    provider.directions_results = [_route_payload(leg(300000, 14400, (-13.96, 33.77), (-15.78, 35.0)))]
    assert engine.check_health() == "healthy"
