"""Cache rows for delivery time-window reports.

One row per interval, upserted on ``interval``. Storage belongs to the
external store; this module only writes the rows.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from ..config import settings
from ..db.supabase import get_supabase_client
from ..services.routing.models import DeliveryTimeWindowReport

logger = logging.getLogger(__name__)


class TimeWindowCache(Protocol):
    def store(self, report: DeliveryTimeWindowReport) -> None:
        ...


def build_cache_rows(
    report: DeliveryTimeWindowReport,
    *,
    timestamp: datetime | None = None,
) -> list[dict[str, Any]]:
    updated_at = (timestamp or datetime.now(timezone.utc)).isoformat()
    rows: list[dict[str, Any]] = []
    for window in report.windows:
        rows.append(
            {
                "interval": window.interval,
                "estimates": {
                    "origin": report.origin,
                    "departure_time": window.departure_time.isoformat(),
                    "destinations": [asdict(estimate) for estimate in window.estimates],
                    "failed_destinations": list(window.failed_destinations),
                },
                "average_duration": window.estimated_duration,
                "traffic_conditions": window.traffic_conditions,
                "optimal_window": report.optimal_window,
                "updated_at": updated_at,
            }
        )
    return rows


class SupabaseTimeWindowCache:
    """Upserts report rows into the configured Supabase table."""

    def __init__(
        self,
        table: str | None = None,
        client_factory: Callable[[], Optional[Any]] = get_supabase_client,
    ) -> None:
        self.table = table or settings.time_window_table
        self._client_factory = client_factory

    def store(self, report: DeliveryTimeWindowReport) -> None:
        supabase = self._client_factory()
        if not supabase:
            logger.info("Supabase not configured - time-window report not cached")
            return

        rows = build_cache_rows(report)
        if not rows:
            return
        try:
            supabase.table(self.table).upsert(rows, on_conflict="interval").execute()
            logger.info(f"Cached {len(rows)} time-window rows (optimal: {report.optimal_window})")
        except Exception as e:
            # The cache is best-effort; the report is still returned to the caller
            logger.warning(f"Failed to cache time-window report: {e}")
