from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from satguard.db.session import get_db
from satguard.api.schemas import AlertOut
from satguard.core.config import settings
from satguard.core.errors import NotFound
from satguard.services.alerts import acknowledge_alert, list_alerts, recent_alerts
from datetime import timedelta
from typing import List

router = APIRouter()


@router.get("", response_model=List[AlertOut])
def read_alerts(db: Session = Depends(get_db)):
    return list_alerts(db)


@router.get("/recent", response_model=List[AlertOut])
def read_recent_alerts(
    hours: float = Query(default=settings.ALERT_WINDOW_HOURS, gt=0, le=24 * 30),
    db: Session = Depends(get_db),
):
    """Alerts from the last `hours`, unacknowledged first, newest first."""
    return recent_alerts(db, window=timedelta(hours=hours))


@router.post("/{alert_id}/acknowledge", response_model=AlertOut)
def acknowledge(alert_id: int, db: Session = Depends(get_db)):
    try:
        return acknowledge_alert(db, alert_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
