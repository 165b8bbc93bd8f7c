from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from satguard.core.config import settings
from satguard.api.api import api_router
from satguard.db.session import init_db
import logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_db()
    logger.info(f"{settings.PROJECT_NAME} ready, API at {settings.API_PREFIX}")
    yield
    logger.info(f"{settings.PROJECT_NAME} shut down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Satellite collision detection and alerting API: catalogue loading, pairwise close-approach screening, and an acknowledgeable alert stream.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API", "status": "active", "version": "1.0.0"}

@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(api_router, prefix=settings.API_PREFIX)
