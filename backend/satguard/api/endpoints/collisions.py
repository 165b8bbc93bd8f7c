from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from satguard.db.session import get_db
from satguard.api.schemas import CollisionPredictionOut
from satguard.models.collision_prediction import RiskLevel
from satguard.services.predictions import list_active, list_by_level
from typing import List, Optional

router = APIRouter()


@router.get("/active", response_model=List[CollisionPredictionOut])
def read_active_collisions(
    risk_level: Optional[RiskLevel] = Query(None, alias="riskLevel"),
    db: Session = Depends(get_db),
):
    """ACTIVE predictions, closest approach first."""
    return list_active(db, risk_level=risk_level)


@router.get("/critical", response_model=List[CollisionPredictionOut])
def read_critical_collisions(db: Session = Depends(get_db)):
    return list_by_level(db, RiskLevel.CRITICAL)
