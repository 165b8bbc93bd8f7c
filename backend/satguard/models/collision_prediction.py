from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from satguard.db.base_class import Base
from satguard.core.timeutil import utcnow
import enum


class RiskLevel(str, enum.Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @property
    def alertable(self) -> bool:
        return self is not RiskLevel.INFO


_SEVERITY = {RiskLevel.INFO: 1, RiskLevel.WARNING: 2, RiskLevel.CRITICAL: 3}


class PredictionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"


class CollisionPrediction(Base):
    """One evaluated close approach between two catalogue satellites."""
    id = Column(Integer, primary_key=True, index=True)
    # "<low norad>:<high norad>", identical for (A, B) and (B, A)
    pair_key = Column(String, nullable=False, index=True)
    satellite1_id = Column(Integer, ForeignKey("satellite.id"), nullable=False)
    satellite2_id = Column(Integer, ForeignKey("satellite.id"), nullable=False)

    minimum_distance = Column(Float, nullable=False)  # km
    probability_score = Column(Float, nullable=False)  # 0-100
    risk_level = Column(Enum(RiskLevel), nullable=False, index=True)
    status = Column(Enum(PredictionStatus), nullable=False, default=PredictionStatus.ACTIVE, index=True)

    computed_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    resolved_at = Column(DateTime, nullable=True)

    satellite1 = relationship("Satellite", foreign_keys=[satellite1_id], lazy="joined")
    satellite2 = relationship("Satellite", foreign_keys=[satellite2_id], lazy="joined")
    alerts = relationship("Alert", back_populates="prediction", order_by="Alert.id")

    __table_args__ = (
        # At most one ACTIVE row per pair; RESOLVED rows are history
        Index(
            "uq_collisionprediction_active_pair",
            "pair_key",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    def __repr__(self):
        return f"<CollisionPrediction {self.pair_key} {self.risk_level} {self.status}>"
