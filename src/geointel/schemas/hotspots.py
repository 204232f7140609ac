"""Hotspot analysis request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import DeliveryRecord
from .common import CoordinateModel


class DeliveryRecordModel(BaseModel):
    location: CoordinateModel
    timestamp: datetime

    def to_domain(self) -> DeliveryRecord:
        return DeliveryRecord(location=self.location.to_domain(), timestamp=self.timestamp)


class HotspotRequest(BaseModel):
    delivery_history: List[DeliveryRecordModel] = Field(default_factory=list)
    timeframe: Literal["daily", "weekly", "monthly", "custom"] = "weekly"
    start: Optional[datetime] = Field(default=None, description="Lower bound for custom timeframes.")
    end: Optional[datetime] = Field(default=None, description="Upper bound for custom timeframes.")
    include_geojson: bool = False


class TimeframeAnalysisRequest(BaseModel):
    geofence_id: str
    delivery_history: List[DeliveryRecordModel] = Field(default_factory=list)
    start: datetime
    end: datetime


class ClusterModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: int
    center: CoordinateModel
    points: List[CoordinateModel]
    radius_m: float
    popular_times: List[int]
    nearby_places: List[dict]
    total_deliveries: int
    enrichment_error: Optional[str]


class HotspotResponse(BaseModel):
    timeframe: str
    total_records: int
    clusters: List[ClusterModel]
    geojson: Optional[dict] = None


class TimeframeAnalysisResponse(BaseModel):
    geofence_id: str
    start_time: datetime
    end_time: datetime
    total_events: int
    popular_times: List[int]
