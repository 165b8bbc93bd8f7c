# Import all models so SQLAlchemy can resolve relationships
from satguard.models.satellite import Satellite as Satellite, CatalogSource as CatalogSource
from satguard.models.collision_prediction import (
    CollisionPrediction as CollisionPrediction,
    PredictionStatus as PredictionStatus,
    RiskLevel as RiskLevel,
)
from satguard.models.alert import Alert as Alert
