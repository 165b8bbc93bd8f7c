from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from satguard.core.config import settings
from satguard.db.base import Base

connect_args = {}
if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    # FastAPI sync handlers run in a threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    connect_args=connect_args,
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables for every model that is not there yet."""
    Base.metadata.create_all(bind=engine)
