from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, Float
from satguard.db.base_class import Base
import enum
from satguard.core.timeutil import utcnow


class CatalogSource(str, enum.Enum):
    BACKUP = "BACKUP"
    FEED = "FEED"

class Satellite(Base):
    id = Column(Integer, primary_key=True, index=True)
    norad_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, index=True, nullable=False)
    source = Column(Enum(CatalogSource), nullable=False, default=CatalogSource.BACKUP)
    is_active = Column(Boolean, default=True, index=True)

    # Orbital elements (feed satellites)
    line1 = Column(String, nullable=True)
    line2 = Column(String, nullable=True)
    epoch = Column(DateTime, nullable=True)

    # Geodetic state: stored state for backup fixtures, position at load time for TLEs
    latitude = Column(Float, nullable=True)   # deg
    longitude = Column(Float, nullable=True)  # deg
    altitude = Column(Float, nullable=True)   # km

    loaded_at = Column(DateTime, default=utcnow)

    @property
    def has_tle(self) -> bool:
        return bool(self.line1 and self.line2)

    def __repr__(self):
        return f"<Satellite {self.norad_id} {self.name!r}>"
