import requests

from sqlalchemy.orm import Session
from satguard.models.satellite import Satellite, CatalogSource
from satguard.core.config import settings
from satguard.core.errors import DataQualityError, FeedUnavailable
from satguard.core.timeutil import utcnow
from satguard.services.backup_data import BACKUP_SATELLITES
from satguard.services.conjunction import scan_lock
from satguard.services.propagation import jd_to_datetime, resolve_position
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from sgp4.api import Satrec, WGS72
import logging

logger = logging.getLogger(__name__)


@dataclass
class SatelliteRecord:
    """One catalogue entry as delivered by a loader, before it is stored."""
    norad_id: str
    name: str
    line1: Optional[str] = None
    line2: Optional[str] = None
    epoch: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None


def parse_tle_text(text: str) -> List[SatelliteRecord]:
    """
    Parse a 3-line (name, line 1, line 2) TLE listing.
    Malformed groups are logged and skipped; duplicate NORAD ids keep the first entry.
    """
    lines = [line.strip() for line in text.strip().split('\n') if line.strip()]
    records = []
    seen = set()

    i = 0
    while i + 2 < len(lines):
        name, line1, line2 = lines[i], lines[i + 1], lines[i + 2]
        if not (line1.startswith('1 ') and line2.startswith('2 ')):
            # Resynchronise on the next name line
            i += 1
            continue
        i += 3

        try:
            norad_id = str(int(line1[2:7]))
            satellite = Satrec.twoline2rv(line1, line2, WGS72)
            epoch = jd_to_datetime(satellite.jdsatepoch + satellite.jdsatepochF)
        except Exception as e:
            logger.warning(f"Skipping malformed TLE for {name!r}: {e}")
            continue

        if norad_id in seen:
            continue
        seen.add(norad_id)
        records.append(SatelliteRecord(norad_id=norad_id, name=name, line1=line1, line2=line2, epoch=epoch))

    return records


def backup_records() -> List[SatelliteRecord]:
    return [
        SatelliteRecord(norad_id=norad_id, name=name, latitude=lat, longitude=lon, altitude=alt)
        for norad_id, name, lat, lon, alt in BACKUP_SATELLITES
    ]


def replace_catalog(db: Session, records: List[SatelliteRecord], source: CatalogSource) -> int:
    """
    Replace the catalogue with `records` in one transaction.

    Satellites are matched by NORAD id; satellites missing from the new set are
    deactivated rather than deleted so existing predictions keep their references.
    Returns the number of active satellites after the swap.
    """
    now = utcnow()
    with scan_lock:
        try:
            existing = {s.norad_id: s for s in db.query(Satellite).all()}
            incoming = set()

            for rec in records:
                sat = existing.get(rec.norad_id)
                if sat is None:
                    sat = Satellite(norad_id=rec.norad_id)
                    db.add(sat)
                incoming.add(rec.norad_id)

                sat.name = rec.name
                sat.source = source
                sat.is_active = True
                sat.loaded_at = now
                sat.line1 = rec.line1
                sat.line2 = rec.line2
                sat.epoch = rec.epoch
                sat.latitude = rec.latitude
                sat.longitude = rec.longitude
                sat.altitude = rec.altitude

                if sat.has_tle:
                    try:
                        pos = resolve_position(sat, now)
                        sat.latitude, sat.longitude, sat.altitude = pos.latitude, pos.longitude, pos.altitude
                    except DataQualityError as e:
                        logger.warning(f"Loaded without a display position: {e}")

            deactivated = 0
            for norad_id, sat in existing.items():
                if norad_id not in incoming and sat.is_active:
                    sat.is_active = False
                    deactivated += 1

            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info(f"Catalogue replaced from {source.value}: {len(incoming)} active, {deactivated} deactivated")
    return len(incoming)


def load_backup_data(db: Session) -> str:
    count = replace_catalog(db, backup_records(), CatalogSource.BACKUP)
    return f"Loaded {count} satellites from backup data"


def download_feed(url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    url = url or settings.FEED_URL
    timeout = timeout or settings.FEED_TIMEOUT_SECONDS
    try:
        logger.info(f"Fetching TLEs from {url}...")
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Error fetching orbital data feed: {e}")
        raise FeedUnavailable(f"Orbital data feed unavailable: {e}") from e
    return response.text


def fetch_feed_data(db: Session) -> str:
    """
    Replace the catalogue from the external TLE feed.

    The download runs with no lock held and no transaction open; the previous
    catalogue is left untouched unless the whole fetch succeeds.
    """
    records = parse_tle_text(download_feed())
    if not records:
        raise FeedUnavailable("Orbital data feed returned no usable TLE records")

    if len(records) > settings.FEED_MAX_SATELLITES:
        logger.info(f"Feed returned {len(records)} satellites, keeping the first {settings.FEED_MAX_SATELLITES}")
        records = records[:settings.FEED_MAX_SATELLITES]

    count = replace_catalog(db, records, CatalogSource.FEED)
    return f"Loaded {count} satellites from orbital data feed"
