# Import Base class and all models so create_all can detect them
from satguard.db.base_class import Base  # noqa
from satguard.models.satellite import Satellite  # noqa
from satguard.models.collision_prediction import CollisionPrediction  # noqa
from satguard.models.alert import Alert  # noqa
