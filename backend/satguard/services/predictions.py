"""
Collision Prediction Store.

Keeps exactly one ACTIVE CollisionPrediction per unordered satellite pair.
A scan pass upserts every qualifying pair and resolves the ones that no longer
qualify. Nothing here commits; the caller owns the transaction.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set
import logging

from sqlalchemy.orm import Session

from satguard.models.collision_prediction import CollisionPrediction, PredictionStatus, RiskLevel
from satguard.models.satellite import Satellite

logger = logging.getLogger(__name__)


def pair_key(norad_a: str, norad_b: str) -> str:
    """Order-independent identity of a satellite pair."""
    low, high = sorted((str(norad_a), str(norad_b)))
    return f"{low}:{high}"


@dataclass
class PairCandidate:
    """A pair within the collision threshold at one evaluation instant."""
    satellite1: Satellite
    satellite2: Satellite
    distance_km: float
    probability_score: float
    risk_level: RiskLevel

    def __post_init__(self):
        # satellite1 is always the lower NORAD id so (A, B) and (B, A) store identically
        if str(self.satellite1.norad_id) > str(self.satellite2.norad_id):
            self.satellite1, self.satellite2 = self.satellite2, self.satellite1

    @property
    def key(self) -> str:
        return pair_key(self.satellite1.norad_id, self.satellite2.norad_id)


@dataclass
class ReconcileResult:
    created: List[CollisionPrediction] = field(default_factory=list)
    updated: List[CollisionPrediction] = field(default_factory=list)
    resolved: List[CollisionPrediction] = field(default_factory=list)

    @property
    def active(self) -> List[CollisionPrediction]:
        return self.created + self.updated


def get_active(db: Session, key: str) -> Optional[CollisionPrediction]:
    return (
        db.query(CollisionPrediction)
        .filter(CollisionPrediction.pair_key == key)
        .filter(CollisionPrediction.status == PredictionStatus.ACTIVE)
        .one_or_none()
    )


def upsert(db: Session, candidate: PairCandidate, computed_at: datetime) -> tuple:
    """
    Create or refresh the ACTIVE prediction for the candidate's pair.
    Returns (prediction, created).
    """
    prediction = get_active(db, candidate.key)
    created = prediction is None
    if created:
        prediction = CollisionPrediction(
            pair_key=candidate.key,
            satellite1=candidate.satellite1,
            satellite2=candidate.satellite2,
            status=PredictionStatus.ACTIVE,
        )
        db.add(prediction)

    prediction.minimum_distance = candidate.distance_km
    prediction.probability_score = candidate.probability_score
    prediction.risk_level = candidate.risk_level
    prediction.computed_at = computed_at
    db.flush()
    return prediction, created


def reconcile(
    db: Session,
    candidates: Iterable[PairCandidate],
    computed_at: datetime,
    excluded_norad_ids: Iterable[str] = (),
    stale_before: Optional[datetime] = None,
) -> ReconcileResult:
    """
    Apply one scan pass to the store.

    Pairs involving a satellite in `excluded_norad_ids` (not evaluated this
    pass) keep their ACTIVE prediction unchanged, unless the prediction was
    last computed before `stale_before`. Those are resolved, so a satellite
    that keeps failing its data checks cannot hold a pair ACTIVE forever.
    """
    result = ReconcileResult()
    seen: Dict[str, PairCandidate] = {}
    for candidate in candidates:
        # Applying the same pair twice in one pass would double count it
        if candidate.key in seen:
            continue
        seen[candidate.key] = candidate
        prediction, created = upsert(db, candidate, computed_at)
        (result.created if created else result.updated).append(prediction)

    excluded: Set[str] = {str(n) for n in excluded_norad_ids}
    query = db.query(CollisionPrediction).filter(CollisionPrediction.status == PredictionStatus.ACTIVE)
    if seen:
        query = query.filter(CollisionPrediction.pair_key.notin_(list(seen)))
    for prediction in query.all():
        low, high = prediction.pair_key.split(":", 1)
        stale = stale_before is not None and prediction.computed_at < stale_before
        if (low in excluded or high in excluded) and not stale:
            continue
        prediction.status = PredictionStatus.RESOLVED
        prediction.resolved_at = computed_at
        result.resolved.append(prediction)
        logger.info(f"Resolved close approach {prediction.pair_key}")

    db.flush()
    return result


def list_active(db: Session, risk_level: Optional[RiskLevel] = None) -> List[CollisionPrediction]:
    """ACTIVE predictions, closest first."""
    query = db.query(CollisionPrediction).filter(CollisionPrediction.status == PredictionStatus.ACTIVE)
    if risk_level is not None:
        query = query.filter(CollisionPrediction.risk_level == risk_level)
    return query.order_by(CollisionPrediction.minimum_distance, CollisionPrediction.id).all()


def list_by_level(db: Session, level: RiskLevel) -> List[CollisionPrediction]:
    return list_active(db, risk_level=level)
