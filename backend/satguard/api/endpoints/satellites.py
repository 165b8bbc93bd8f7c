from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from satguard.db.session import get_db
from satguard.models.satellite import Satellite
from satguard.api.schemas import SatelliteOut
from satguard.core.errors import FeedUnavailable, ScanInProgress
from satguard.services.conjunction import detect_collisions
from satguard.services.ingestion import fetch_feed_data, load_backup_data
from typing import List

router = APIRouter()


@router.get("", response_model=List[SatelliteOut])
def read_satellites(db: Session = Depends(get_db)):
    return (
        db.query(Satellite)
        .filter(Satellite.is_active)
        .order_by(Satellite.norad_id)
        .all()
    )


@router.post("/load-backup-data", response_model=str)
def load_backup(db: Session = Depends(get_db)):
    """Replace the catalogue with the built-in backup satellites."""
    return load_backup_data(db)


@router.post("/fetch-nasa-data", response_model=str)
def fetch_feed(db: Session = Depends(get_db)):
    """
    Replace the catalogue from the external TLE feed.
    The previous catalogue is kept when the feed fails.
    """
    try:
        return fetch_feed_data(db)
    except FeedUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/detect-collisions", response_model=str)
def run_collision_detection(db: Session = Depends(get_db)):
    """
    Run one full collision scan and return its summary.
    Rejected with 409 while another scan is running.
    """
    try:
        return detect_collisions(db).message
    except ScanInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
