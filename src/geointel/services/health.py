"""Periodic synthetic health checks for the geospatial engines."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], str]


class HealthMonitor:
    """Runs each check on a timer in a daemon thread and keeps the last report.

    Checks should use their own provider client so check timeouts never eat
    into user-facing request budgets.
    """

    def __init__(self, checks: Mapping[str, HealthCheck], *, interval_seconds: float) -> None:
        self.checks = dict(checks)
        self.interval_seconds = interval_seconds
        self._report: Optional[dict] = None
        self._report_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> dict:
        services: dict[str, str] = {}
        for name, check in self.checks.items():
            try:
                services[name] = check()
            except Exception as exc:
                logger.error(f"Health check '{name}' raised: {exc}")
                services[name] = "unhealthy"

        healthy = all(status == "healthy" for status in services.values())
        report = {
            "status": "healthy" if healthy else "unhealthy",
            "services": services,
            "checked_at": datetime.now(timezone.utc).isoformat(),
        }
        with self._report_lock:
            self._report = report
        if not healthy:
            logger.warning(f"Health check reported unhealthy services: {services}")
        return report

    @property
    def last_report(self) -> Optional[dict]:
        with self._report_lock:
            return self._report

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running or self.interval_seconds <= 0:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="geointel-health", daemon=True)
        self._thread.start()
        logger.info(f"Health monitor started (every {self.interval_seconds:.0f}s)")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_seconds + 1)
            self._thread = None

    def _loop(self) -> None:
        self.run_once()
        while not self._stop.wait(self.interval_seconds):
            self.run_once()
