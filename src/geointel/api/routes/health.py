"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.health import HealthMonitor
from ..dependencies import get_health_monitor

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/services", status_code=status.HTTP_200_OK)
def health_services(
    refresh: bool = False,
    monitor: HealthMonitor = Depends(get_health_monitor),
) -> dict:
    """Last periodic health report; runs the checks now if none exists yet or ``refresh`` is set."""
    report = monitor.last_report
    if refresh or report is None:
        report = monitor.run_once()
    return report
