from fastapi import APIRouter
from satguard.api.endpoints import satellites, collisions, alerts, stats

api_router = APIRouter()

api_router.include_router(satellites.router, prefix="/satellites", tags=["satellites"])
api_router.include_router(collisions.router, prefix="/collisions", tags=["collisions"])
api_router.include_router(alerts.router, prefix="/alerts", tags=["alerts"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
