"""
Alert Generator and Alert Store.

Alerts are raised for ACTIVE CRITICAL/WARNING predictions. One prediction row
is one continuous ACTIVE occurrence of a close approach, so deduplication is
decided per prediction:

- nothing is raised while the occurrence has an unacknowledged alert;
- nothing is raised if the occurrence was already alerted at the same or a
  more severe level, even after acknowledgment;
- an escalation (WARNING -> CRITICAL) after acknowledgment raises a new alert;
- a pair that resolves and qualifies again is a new prediction, so it alerts again.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from satguard.core.config import settings
from satguard.core.errors import AlertNotFound
from satguard.core.timeutil import utcnow
from satguard.models.alert import Alert
from satguard.models.collision_prediction import CollisionPrediction, PredictionStatus

logger = logging.getLogger(__name__)


def format_alert_message(prediction: CollisionPrediction) -> str:
    return (
        f"{prediction.risk_level.value}: {prediction.satellite1.name} and {prediction.satellite2.name} "
        f"are {prediction.minimum_distance:.2f} km apart "
        f"(collision probability {prediction.probability_score:.1f}%)"
    )


def needs_alert(prediction: CollisionPrediction) -> bool:
    if prediction.status != PredictionStatus.ACTIVE or not prediction.risk_level.alertable:
        return False
    if any(not alert.acknowledged for alert in prediction.alerts):
        return False
    alerted = max((alert.alert_level.severity for alert in prediction.alerts), default=0)
    return prediction.risk_level.severity > alerted


def generate_alerts(
    db: Session,
    predictions: Iterable[CollisionPrediction],
    sent_at: Optional[datetime] = None,
) -> List[Alert]:
    """Raise alerts for the predictions touched by a scan pass. Does not commit."""
    sent_at = sent_at or utcnow()
    created = []
    for prediction in predictions:
        if not needs_alert(prediction):
            continue
        alert = Alert(
            alert_level=prediction.risk_level,
            message=format_alert_message(prediction),
            prediction=prediction,
            sent_at=sent_at,
            acknowledged=False,
        )
        db.add(alert)
        created.append(alert)
        logger.info(f"Alert raised: {alert.message}")
    db.flush()
    return created


def list_alerts(db: Session) -> List[Alert]:
    """All alerts, newest first."""
    return db.query(Alert).order_by(Alert.sent_at.desc(), Alert.id.desc()).all()


def recent_alerts(
    db: Session,
    window: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> List[Alert]:
    """
    Alerts sent within `window` of `now`: unacknowledged first, then newest first.
    """
    if window is None:
        window = timedelta(hours=settings.ALERT_WINDOW_HOURS)
    now = now or utcnow()
    return (
        db.query(Alert)
        .filter(Alert.sent_at >= now - window)
        .order_by(Alert.acknowledged.asc(), Alert.sent_at.desc(), Alert.id.desc())
        .all()
    )


def acknowledge_alert(db: Session, alert_id: int) -> Alert:
    """
    Mark an alert acknowledged. Acknowledging twice is a no-op success.
    Raises AlertNotFound for unknown ids.
    """
    alert = db.get(Alert, alert_id)
    if alert is None:
        raise AlertNotFound(alert_id)
    if alert.acknowledged:
        return alert

    alert.acknowledged = True
    alert.acknowledged_at = utcnow()
    db.commit()
    db.refresh(alert)
    logger.info(f"Alert {alert_id} acknowledged")
    return alert
