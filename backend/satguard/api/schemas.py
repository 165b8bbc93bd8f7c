from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from satguard.core.timeutil import as_utc_iso
from satguard.models.collision_prediction import PredictionStatus, RiskLevel
from satguard.models.satellite import CatalogSource


class APIModel(BaseModel):
    # The dashboard reads camelCase fields (noradId, minimumDistance, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SatelliteOut(APIModel):
    id: int
    name: str
    norad_id: str
    source: CatalogSource
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    epoch: Optional[datetime] = None

    @field_serializer("epoch")
    def _epoch(self, value: Optional[datetime]):
        return as_utc_iso(value) if value else None


class SatelliteRef(APIModel):
    id: int
    name: str
    norad_id: str


class CollisionPredictionOut(APIModel):
    id: int
    satellite1: SatelliteRef
    satellite2: SatelliteRef
    minimum_distance: float
    probability_score: float
    risk_level: RiskLevel
    status: PredictionStatus
    computed_at: datetime
    resolved_at: Optional[datetime] = None

    @field_serializer("computed_at", "resolved_at")
    def _timestamps(self, value: Optional[datetime]):
        return as_utc_iso(value) if value else None


class AlertOut(APIModel):
    id: int
    alert_level: RiskLevel
    message: str
    sent_at: datetime
    acknowledged: bool
    acknowledged_at: Optional[datetime] = None
    prediction: CollisionPredictionOut

    @field_serializer("sent_at", "acknowledged_at")
    def _timestamps(self, value: Optional[datetime]):
        return as_utc_iso(value) if value else None
