import time

from geointel.services.health import HealthMonitor


def test_run_once_aggregates_statuses():
    def _boom():
        raise RuntimeError("check crashed")

    monitor = HealthMonitor(
        {"ok": lambda: "healthy", "down": lambda: "unhealthy", "crash": _boom},
        interval_seconds=0,
    )

    report = monitor.run_once()

    assert report["status"] == "unhealthy"
    assert report["services"] == {"ok": "healthy", "down": "unhealthy", "crash": "unhealthy"}
    assert monitor.last_report is report


def test_all_healthy():
    report = HealthMonitor({"a": lambda: "healthy"}, interval_seconds=0).run_once()

    assert report["status"] == "healthy"
    assert "checked_at" in report


def test_disabled_monitor_does_not_start():
    monitor = HealthMonitor({"a": lambda: "healthy"}, interval_seconds=0)

    monitor.start()

    assert not monitor.running
    assert monitor.last_report is None


def test_background_loop_runs_and_stops():
    calls = []
    monitor = HealthMonitor({"a": lambda: calls.append(1) or "healthy"}, interval_seconds=0.05)

    monitor.start()
    deadline = time.monotonic() + 2
    while len(calls) < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    monitor.stop()

    assert len(calls) >= 2
    assert not monitor.running
    assert monitor.last_report["status"] == "healthy"
