from sqlalchemy import Column, Integer, Boolean, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from satguard.db.base_class import Base
from satguard.models.collision_prediction import RiskLevel
from satguard.core.timeutil import utcnow


class Alert(Base):
    """Operator alert raised for a CRITICAL or WARNING prediction."""
    id = Column(Integer, primary_key=True, index=True)
    alert_level = Column(Enum(RiskLevel), nullable=False)
    message = Column(Text, nullable=False)
    prediction_id = Column(Integer, ForeignKey("collisionprediction.id"), nullable=False, index=True)
    sent_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    acknowledged = Column(Boolean, nullable=False, default=False, index=True)
    acknowledged_at = Column(DateTime, nullable=True)

    prediction = relationship("CollisionPrediction", back_populates="alerts", lazy="joined")
