from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from geointel.models.domain import Coordinate, CustomerTier, DeliveryStop
from geointel.services.routing.optimizer import WeightingPolicy, optimize_stop_order, time_urgency

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
DRIVER = Coordinate(0, 0)


def _stop(stop_id: str, lat: float, lng: float, **kwargs) -> DeliveryStop:
    return DeliveryStop(id=stop_id, location=Coordinate(lat, lng), **kwargs)


def test_plain_nearest_neighbour_order():
    stops = [_stop("far", 0, 0.3), _stop("near", 0, 0.1), _stop("mid", 0, 0.2)]

    result = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)

    assert [item.stop.id for item in result.stops] == ["near", "mid", "far"]
    assert [item.sequence for item in result.stops] == [1, 2, 3]
    assert result.total_distance_km == pytest.approx(result.stops[-1].cumulative_distance_km)
    assert result.stops[0].eta == NOW + timedelta(minutes=result.stops[0].leg_duration_min)


def test_premium_customer_pulled_forward():
    stops = [
        _stop("standard", 0, 0.01),
        _stop("premium", 0, -0.02, customer_tier=CustomerTier.PREMIUM),
    ]

    result = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(premium_bonus=5.0), now=NOW)

    assert result.stops[0].stop.id == "premium"


def test_urgent_time_window_pulled_forward():
    stops = [
        _stop("relaxed", 0, 0.01, time_window=NOW + timedelta(hours=8)),
        _stop("urgent", 0, -0.03, time_window=NOW + timedelta(minutes=5)),
    ]

    result = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)

    assert result.stops[0].stop.id == "urgent"


def test_order_value_bonus():
    stops = [_stop("cheap", 0, 0.01, value=Decimal("1")), _stop("valuable", 0, -0.02, value=Decimal("500"))]

    result = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)

    assert result.stops[0].stop.id == "valuable"


def test_ties_break_on_stop_id_and_result_is_deterministic():
    stops = [_stop("b", 0, 0.1), _stop("a", 0, -0.1), _stop("c", 0.1, 0)]

    first = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)
    second = optimize_stop_order(DRIVER, list(reversed(stops)), policy=WeightingPolicy(), now=NOW)

    assert first.stops[0].stop.id == "a"
    assert [item.stop.id for item in first.stops] == [item.stop.id for item in second.stops]


def test_duplicate_and_invalid_stops_are_skipped():
    stops = [
        _stop("a", 0, 0.1),
        _stop("a", 0, 0.2),
        _stop("nan", 0, 0.3, value=Decimal("NaN")),
    ]

    result = optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)

    assert [item.stop.id for item in result.stops] == ["a"]
    assert [(item.stop_id, item.reason) for item in result.skipped] == [
        ("a", "duplicate stop id"),
        ("nan", "order value is not a finite number"),
    ]


def test_inputs_are_not_mutated():
    stops = [_stop("x", 0, 0.1), _stop("y", 0, 0.2)]
    snapshot = list(stops)

    optimize_stop_order(DRIVER, stops, policy=WeightingPolicy(), now=NOW)

    assert stops == snapshot


def test_time_urgency_grows_past_deadline():
    deadline = NOW + timedelta(minutes=30)

    assert time_urgency(NOW + timedelta(hours=5), NOW, 60) == 0
    assert time_urgency(deadline, NOW, 60) == pytest.approx(30)
    assert time_urgency(deadline, NOW + timedelta(minutes=40), 60) == pytest.approx(70)
