from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    PROJECT_NAME: str = "SatGuard"
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite:///./satguard.db"

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # 3-line TLE feed used by /satellites/fetch-nasa-data
    FEED_URL: str = "https://celestrak.org/NORAD/elements/gp.php?GROUP=stations&FORMAT=tle"
    FEED_TIMEOUT_SECONDS: float = 30.0
    FEED_MAX_SATELLITES: int = 300

    MAX_EPOCH_AGE_DAYS: float = 30.0
    ALERT_WINDOW_HOURS: float = 24.0

    LOG_LEVEL: str = "INFO"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        url = self.DATABASE_URL
        # Some providers still hand out the 'postgres://' scheme, which SQLAlchemy dropped
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
