"""
Error types raised by the SatGuard services.

API endpoints translate these into HTTP status codes; per-satellite
DataQualityError is recovered inside the scan and only counted.
"""


class SatGuardError(Exception):
    """Base class for all service errors."""


class DataQualityError(SatGuardError):
    """A satellite's position cannot be resolved at the evaluation time."""

    def __init__(self, norad_id: str, reason: str):
        self.norad_id = norad_id
        self.reason = reason
        super().__init__(f"Satellite {norad_id}: {reason}")


class FeedUnavailable(SatGuardError):
    """The external orbital-data feed failed, timed out or returned nothing usable."""


class ScanInProgress(SatGuardError):
    """Another collision scan is already running."""

    def __init__(self):
        super().__init__("A collision scan is already in progress, try again shortly")


class NotFound(SatGuardError):
    """A requested entity does not exist."""


class AlertNotFound(NotFound):
    def __init__(self, alert_id: int):
        self.alert_id = alert_id
        super().__init__(f"Alert {alert_id} not found")
