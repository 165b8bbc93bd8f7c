from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from satguard.db.session import get_db
from satguard.models.satellite import Satellite
from satguard.models.collision_prediction import CollisionPrediction, PredictionStatus, RiskLevel
from satguard.models.alert import Alert

router = APIRouter()


@router.get("/overview")
def get_overview_stats(db: Session = Depends(get_db)):
    """
    Counts for the dashboard header.
    All values are computed from actual database records.
    """
    active_satellites = db.query(func.count(Satellite.id)).filter(Satellite.is_active).scalar() or 0

    level_counts = dict(
        db.query(CollisionPrediction.risk_level, func.count(CollisionPrediction.id))
        .filter(CollisionPrediction.status == PredictionStatus.ACTIVE)
        .group_by(CollisionPrediction.risk_level)
        .all()
    )

    total_alerts = db.query(func.count(Alert.id)).scalar() or 0
    unacknowledged = db.query(func.count(Alert.id)).filter(Alert.acknowledged.is_(False)).scalar() or 0

    return {
        "activeSatellites": active_satellites,
        "activeCollisions": sum(level_counts.values()),
        "criticalCollisions": level_counts.get(RiskLevel.CRITICAL, 0),
        "warningCollisions": level_counts.get(RiskLevel.WARNING, 0),
        "infoCollisions": level_counts.get(RiskLevel.INFO, 0),
        "totalAlerts": total_alerts,
        "unacknowledgedAlerts": unacknowledged,
    }
