"""Delivery hotspot endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.hotspots import (
    ClusterModel,
    HotspotRequest,
    HotspotResponse,
    TimeframeAnalysisRequest,
    TimeframeAnalysisResponse,
)
from ...services.export import clusters_to_geojson
from ...services.geofencing import GeofenceEngine
from ..dependencies import get_geofence_engine

router = APIRouter(prefix="/hotspots", tags=["hotspots"])


@router.post("/analyze", response_model=HotspotResponse, status_code=status.HTTP_200_OK)
def analyze_delivery_hotspots(
    payload: HotspotRequest,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> HotspotResponse:
    history = [record.to_domain() for record in payload.delivery_history]
    clusters = engine.analyze_delivery_hotspots(
        history, payload.timeframe, start=payload.start, end=payload.end
    )
    return HotspotResponse(
        timeframe=payload.timeframe,
        total_records=len(history),
        clusters=[ClusterModel.model_validate(cluster) for cluster in clusters],
        geojson=clusters_to_geojson(clusters) if payload.include_geojson else None,
    )


@router.post("/timeframe", response_model=TimeframeAnalysisResponse, status_code=status.HTTP_200_OK)
def analyze_timeframe(
    payload: TimeframeAnalysisRequest,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> TimeframeAnalysisResponse:
    """Deliveries inside one geofence between two instants, bucketed by hour."""
    summary = engine.analyze_timeframe(
        [record.to_domain() for record in payload.delivery_history],
        payload.geofence_id,
        payload.start,
        payload.end,
    )
    return TimeframeAnalysisResponse(**summary)
