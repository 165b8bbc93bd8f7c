"""
Pairwise Collision Scanner.

Detects when two catalogue satellites are within 5 km of each other at the
evaluation instant, classifies the risk, reconciles the findings against the
prediction store and raises alerts. Uses numpy for the O(n^2) distance pass.
"""
import numpy as np
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
import logging

from satguard.core.config import settings
from satguard.core.errors import DataQualityError, ScanInProgress
from satguard.core.timeutil import utcnow
from satguard.models.alert import Alert
from satguard.models.collision_prediction import RiskLevel
from satguard.models.satellite import Satellite
from satguard.services.alerts import generate_alerts
from satguard.services.predictions import PairCandidate, ReconcileResult, reconcile
from satguard.services.propagation import resolve_catalog

logger = logging.getLogger(__name__)

COLLISION_THRESHOLD_KM = 5.0
CRITICAL_THRESHOLD_KM = 2.0
WARNING_THRESHOLD_KM = 3.5

# Held for the whole of a scan and around catalogue swaps
scan_lock = threading.Lock()


def classify_risk(distance_km: float) -> Optional[RiskLevel]:
    """Classify risk based on distance; None when the pair does not qualify."""
    if distance_km < CRITICAL_THRESHOLD_KM:
        return RiskLevel.CRITICAL
    elif distance_km < WARNING_THRESHOLD_KM:
        return RiskLevel.WARNING
    elif distance_km <= COLLISION_THRESHOLD_KM:
        return RiskLevel.INFO
    return None


def probability_score(distance_km: float) -> float:
    """
    Collision probability score in [0, 100].
    100 at 0 km, 0 at the 5 km threshold, strictly decreasing in between.
    """
    ratio = min(max(distance_km / COLLISION_THRESHOLD_KM, 0.0), 1.0)
    return 100.0 * (1.0 - ratio) ** 2


def scan_pairs(positions: np.ndarray, threshold_km: float = COLLISION_THRESHOLD_KM) -> List[Tuple[int, int, float]]:
    """
    Return (i, j, distance_km) for every unordered pair i < j of rows in
    `positions` (shape (n, 3), km) that lie within `threshold_km`.
    """
    n = len(positions)
    pairs = []
    # Vectorised distance from row i to all rows j > i; only qualifying pairs allocate
    for i in range(n - 1):
        diffs = positions[i + 1:] - positions[i]
        distances = np.linalg.norm(diffs, axis=1)
        for idx in np.flatnonzero(distances <= threshold_km):
            pairs.append((i, i + 1 + int(idx), float(distances[idx])))
    return pairs


def find_candidates(resolved) -> List[PairCandidate]:
    """Build pair candidates from (satellite, ResolvedPosition) tuples."""
    if len(resolved) < 2:
        return []
    eci_matrix = np.array([pos.eci for _, pos in resolved])  # shape (n, 3)
    candidates = []
    for i, j, distance in scan_pairs(eci_matrix):
        level = classify_risk(distance)
        if level is None:
            continue
        candidates.append(PairCandidate(
            satellite1=resolved[i][0],
            satellite2=resolved[j][0],
            distance_km=distance,
            probability_score=probability_score(distance),
            risk_level=level,
        ))
    return candidates


@dataclass
class ScanSummary:
    computed_at: datetime
    satellites_scanned: int
    reconciled: ReconcileResult
    alerts: List[Alert] = field(default_factory=list)
    skipped: List[DataQualityError] = field(default_factory=list)

    def count(self, level: RiskLevel) -> int:
        return sum(1 for p in self.reconciled.active if p.risk_level == level)

    @property
    def message(self) -> str:
        active = self.reconciled.active
        msg = (
            f"Collision detection complete: scanned {self.satellites_scanned} satellites, "
            f"found {len(active)} close approaches "
            f"({self.count(RiskLevel.CRITICAL)} critical, {self.count(RiskLevel.WARNING)} warning, "
            f"{self.count(RiskLevel.INFO)} info); "
            f"{len(self.reconciled.created)} new, {len(self.reconciled.updated)} updated, "
            f"{len(self.reconciled.resolved)} resolved; {len(self.alerts)} alerts created"
        )
        if self.skipped:
            msg += f"; {len(self.skipped)} satellites skipped due to data quality issues"
        return msg


def detect_collisions(db: Session, timestamp: Optional[datetime] = None) -> ScanSummary:
    """
    Run one full scan: resolve positions, test all pairs, reconcile the
    prediction store and raise alerts, committed as one transaction.

    Only one scan runs at a time; a concurrent call raises ScanInProgress.
    """
    if not scan_lock.acquire(blocking=False):
        raise ScanInProgress()
    try:
        timestamp = timestamp or utcnow()
        satellites = (
            db.query(Satellite)
            .filter(Satellite.is_active)
            .order_by(Satellite.norad_id)
            .all()
        )
        resolved, failures = resolve_catalog(satellites, timestamp)
        for sat, pos in resolved:
            # Display position follows the evaluation instant
            if sat.has_tle:
                sat.latitude, sat.longitude, sat.altitude = pos.latitude, pos.longitude, pos.altitude
        candidates = find_candidates(resolved)

        result = reconcile(
            db,
            candidates,
            timestamp,
            excluded_norad_ids=[f.norad_id for f in failures],
            stale_before=timestamp - timedelta(days=settings.MAX_EPOCH_AGE_DAYS),
        )
        alerts = generate_alerts(db, result.active, sent_at=timestamp)
        db.commit()

        summary = ScanSummary(
            computed_at=timestamp,
            satellites_scanned=len(resolved),
            reconciled=result,
            alerts=alerts,
            skipped=failures,
        )
        logger.info(summary.message)
        return summary
    except Exception:
        db.rollback()
        logger.exception("Collision detection failed")
        raise
    finally:
        scan_lock.release()
