"""
Position Resolver.

Turns a catalogue satellite into a 3D Cartesian position (km, TEME frame)
plus geodetic latitude/longitude/altitude at an evaluation instant.
TLE satellites are propagated with SGP4; backup-fixture satellites carry a
stored geodetic state which is rotated into the same frame.
"""
from sgp4.api import Satrec, WGS72, jday
import numpy as np
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple, List, Optional, Iterable
import logging

from satguard.core.config import settings
from satguard.core.errors import DataQualityError
from satguard.models.satellite import Satellite

logger = logging.getLogger(__name__)

# WGS84 ellipsoid
XKMPER = 6378.137  # Earth equatorial radius in km
F = 1.0 / 298.257223563  # Flattening
E2 = F * (2.0 - F)


@dataclass(frozen=True)
class ResolvedPosition:
    norad_id: str
    eci: np.ndarray   # km, TEME
    latitude: float   # deg
    longitude: float  # deg
    altitude: float   # km


def jd_to_datetime(jd: float) -> datetime:
    """Convert Julian Date to naive UTC datetime."""
    # JD of Unix Epoch (1970-01-01 00:00:00 UTC) is 2440587.5
    return datetime(1970, 1, 1) + timedelta(days=jd - 2440587.5)


def julian_date(dt: datetime) -> Tuple[float, float]:
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second + dt.microsecond / 1e6)


def gmst(jd: float, fr: float) -> float:
    """
    Calculate Greenwich Mean Sidereal Time (angle in radians).
    Using the IAU 1982 model.
    """
    # Julian centuries from J2000.0
    tut1 = (jd - 2451545.0 + fr) / 36525.0

    # GMST in seconds
    temp = (-6.2e-6 * tut1 * tut1 * tut1
            + 0.093104 * tut1 * tut1
            + (876600.0 * 3600.0 + 8640184.812866) * tut1
            + 67310.54841)

    # Convert to radians, mod 2*pi
    gmst_rad = math.fmod(temp * (2.0 * math.pi / 86400.0), 2.0 * math.pi)
    if gmst_rad < 0.0:
        gmst_rad += 2.0 * math.pi

    return gmst_rad


def teme_to_ecef(r_teme: np.ndarray, gmst_angle: float) -> np.ndarray:
    """Rotate a TEME position about Z by GMST into the Earth-fixed frame."""
    cos_t = np.cos(gmst_angle)
    sin_t = np.sin(gmst_angle)
    x, y, z = r_teme
    return np.array([x * cos_t + y * sin_t, -x * sin_t + y * cos_t, z])


def ecef_to_teme(r_ecef: np.ndarray, gmst_angle: float) -> np.ndarray:
    """Inverse of teme_to_ecef."""
    cos_t = np.cos(gmst_angle)
    sin_t = np.sin(gmst_angle)
    x, y, z = r_ecef
    return np.array([x * cos_t - y * sin_t, x * sin_t + y * cos_t, z])


def ecef_to_geodetic(x: float, y: float, z: float) -> Tuple[float, float, float]:
    """
    Convert ECEF coordinates (km) to Geodetic (lat, lon, alt).
    Lat/Lon in degrees, Alt in km.
    Uses Bowring's closed-form approximation.
    """
    a = XKMPER
    b = a * (1.0 - F)
    ep2 = (a**2 - b**2) / b**2

    p = np.sqrt(x**2 + y**2)
    theta = np.arctan2(z * a, p * b)

    lon = np.arctan2(y, x)
    lat = np.arctan2(z + ep2 * b * np.sin(theta)**3, p - E2 * a * np.cos(theta)**3)

    n = a / np.sqrt(1.0 - E2 * np.sin(lat)**2)
    alt = (p / np.cos(lat)) - n

    return float(np.degrees(lat)), float(np.degrees(lon)), float(alt)


def geodetic_to_ecef(lat_deg: float, lon_deg: float, alt_km: float) -> np.ndarray:
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    n = XKMPER / math.sqrt(1.0 - E2 * math.sin(lat) ** 2)
    return np.array([
        (n + alt_km) * math.cos(lat) * math.cos(lon),
        (n + alt_km) * math.cos(lat) * math.sin(lon),
        (n * (1.0 - E2) + alt_km) * math.sin(lat),
    ])


def _resolve_tle(sat: Satellite, at: datetime, jd: float, fr: float, gmst_angle: float,
                 max_epoch_age: timedelta) -> ResolvedPosition:
    try:
        satrec = Satrec.twoline2rv(sat.line1, sat.line2, WGS72)
    except Exception as e:
        raise DataQualityError(sat.norad_id, f"unparsable TLE ({e})")

    epoch = jd_to_datetime(satrec.jdsatepoch + satrec.jdsatepochF)
    if abs(at - epoch) > max_epoch_age:
        raise DataQualityError(
            sat.norad_id, f"TLE epoch {epoch.isoformat()} is more than {max_epoch_age.days} days from {at.isoformat()}"
        )

    e, r, _v = satrec.sgp4(jd, fr)
    if e != 0:
        raise DataQualityError(sat.norad_id, f"SGP4 error {e}")

    r_teme = np.array(r)
    if not np.all(np.isfinite(r_teme)):
        raise DataQualityError(sat.norad_id, "non-finite SGP4 position")

    r_ecef = teme_to_ecef(r_teme, gmst_angle)
    lat, lon, alt = ecef_to_geodetic(r_ecef[0], r_ecef[1], r_ecef[2])
    return ResolvedPosition(sat.norad_id, r_teme, lat, lon, alt)


def _resolve_state(sat: Satellite, gmst_angle: float) -> ResolvedPosition:
    lat, lon, alt = sat.latitude, sat.longitude, sat.altitude
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in (lat, lon, alt)):
        raise DataQualityError(sat.norad_id, "stored state is incomplete")
    if not -90.0 <= lat <= 90.0:
        raise DataQualityError(sat.norad_id, f"latitude {lat} out of range")
    if alt < 0.0:
        raise DataQualityError(sat.norad_id, f"altitude {alt} km is below the surface")

    r_teme = ecef_to_teme(geodetic_to_ecef(lat, lon, alt), gmst_angle)
    return ResolvedPosition(sat.norad_id, r_teme, float(lat), float(lon), float(alt))


def resolve_position(
    sat: Satellite,
    at: datetime,
    max_epoch_age: Optional[timedelta] = None,
) -> ResolvedPosition:
    """
    Resolve one satellite at `at` (naive UTC).
    Raises DataQualityError when the satellite cannot be placed.
    """
    if max_epoch_age is None:
        max_epoch_age = timedelta(days=settings.MAX_EPOCH_AGE_DAYS)
    jd, fr = julian_date(at)
    gmst_angle = gmst(jd, fr)

    if sat.has_tle:
        return _resolve_tle(sat, at, jd, fr, gmst_angle, max_epoch_age)
    if sat.latitude is not None or sat.longitude is not None or sat.altitude is not None:
        return _resolve_state(sat, gmst_angle)
    raise DataQualityError(sat.norad_id, "no orbital elements or stored state")


def resolve_catalog(
    satellites: Iterable[Satellite],
    at: datetime,
    max_epoch_age: Optional[timedelta] = None,
) -> Tuple[List[Tuple[Satellite, ResolvedPosition]], List[DataQualityError]]:
    """
    Resolve every satellite at one instant.
    Failures are logged and returned instead of aborting the batch.
    """
    resolved = []
    failures = []
    for sat in satellites:
        try:
            resolved.append((sat, resolve_position(sat, at, max_epoch_age)))
        except DataQualityError as e:
            logger.warning(f"Excluding satellite from scan: {e}")
            failures.append(e)
    return resolved, failures
