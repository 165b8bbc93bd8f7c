from unittest import mock

import pytest
import requests

from satguard.core.errors import FeedUnavailable
from satguard.models.satellite import CatalogSource, Satellite
from satguard.services import ingestion
from satguard.services.backup_data import BACKUP_SATELLITES
from satguard.services.conjunction import scan_lock
from satguard.services.ingestion import (
    backup_records,
    fetch_feed_data,
    load_backup_data,
    parse_tle_text,
)

from conftest import ISS_EPOCH, ISS_TLE

HUBBLE_TLE = """HST
1 20580U 90037B   19343.52412106  .00000615  00000-0  23025-4 0  9996
2 20580  28.4700 291.7046 0002808 330.3370 117.7604 15.09449447418045
"""


def fake_response(text, status=200):
    response = mock.Mock()
    response.text = text
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    return response


def active_norad_ids(db):
    return sorted(s.norad_id for s in db.query(Satellite).filter(Satellite.is_active).all())


class TestParseTleText:
    def test_parses_triples(self):
        records = parse_tle_text(ISS_TLE + HUBBLE_TLE)
        assert [(r.norad_id, r.name) for r in records] == [("25544", "ISS (ZARYA)"), ("20580", "HST")]
        assert abs((records[0].epoch - ISS_EPOCH).total_seconds()) < 1.0

    def test_skips_garbage_and_resynchronises(self):
        text = "junk header\n" + ISS_TLE + "BROKEN\n1 nonsense\n" + HUBBLE_TLE
        records = parse_tle_text(text)
        assert [r.norad_id for r in records] == ["25544", "20580"]

    def test_duplicate_norad_keeps_first(self):
        records = parse_tle_text(ISS_TLE + ISS_TLE.replace("ISS (ZARYA)", "ISS COPY"))
        assert [r.name for r in records] == ["ISS (ZARYA)"]

    def test_empty(self):
        assert parse_tle_text("") == []


class TestBackupData:
    def test_load_backup(self, db):
        message = load_backup_data(db)
        assert message == f"Loaded {len(BACKUP_SATELLITES)} satellites from backup data"
        sats = db.query(Satellite).all()
        assert len(sats) == len(BACKUP_SATELLITES)
        assert all(s.source == CatalogSource.BACKUP and s.is_active for s in sats)

    def test_reload_keeps_identity(self, db):
        load_backup_data(db)
        ids = {s.norad_id: s.id for s in db.query(Satellite).all()}
        load_backup_data(db)
        assert {s.norad_id: s.id for s in db.query(Satellite).all()} == ids

    def test_backup_records_have_state(self):
        assert all(r.line1 is None and r.altitude > 0 for r in backup_records())


class TestFetchFeed:
    def test_replaces_catalogue(self, db):
        load_backup_data(db)
        with mock.patch.object(ingestion.requests, "get", return_value=fake_response(ISS_TLE + HUBBLE_TLE)) as get:
            message = fetch_feed_data(db)

        assert message == "Loaded 2 satellites from orbital data feed"
        assert get.call_args.kwargs["timeout"] > 0
        assert active_norad_ids(db) == ["20580", "25544"]
        iss = db.query(Satellite).filter(Satellite.norad_id == "25544").one()
        assert iss.source == CatalogSource.FEED
        assert iss.line1.startswith("1 25544U")
        # Backup-only satellites are kept as inactive rows
        assert db.query(Satellite).filter(Satellite.is_active.is_(False)).count() == len(BACKUP_SATELLITES) - 2

    @pytest.mark.parametrize("failure", [
        requests.Timeout("read timed out"),
        requests.ConnectionError("connection refused"),
    ])
    def test_network_failure_keeps_catalogue(self, db, failure):
        load_backup_data(db)
        before = active_norad_ids(db)
        with mock.patch.object(ingestion.requests, "get", side_effect=failure):
            with pytest.raises(FeedUnavailable):
                fetch_feed_data(db)
        assert active_norad_ids(db) == before

    def test_http_error_keeps_catalogue(self, db):
        load_backup_data(db)
        before = active_norad_ids(db)
        with mock.patch.object(ingestion.requests, "get", return_value=fake_response("", status=503)):
            with pytest.raises(FeedUnavailable):
                fetch_feed_data(db)
        assert active_norad_ids(db) == before

    def test_unusable_payload(self, db):
        with mock.patch.object(ingestion.requests, "get", return_value=fake_response("<html>maintenance</html>")):
            with pytest.raises(FeedUnavailable):
                fetch_feed_data(db)
        assert db.query(Satellite).count() == 0

    def test_catalogue_size_capped(self, db, monkeypatch):
        monkeypatch.setattr(ingestion.settings, "FEED_MAX_SATELLITES", 1)
        with mock.patch.object(ingestion.requests, "get", return_value=fake_response(ISS_TLE + HUBBLE_TLE)):
            assert fetch_feed_data(db) == "Loaded 1 satellites from orbital data feed"
        assert active_norad_ids(db) == ["25544"]

    def test_download_holds_no_lock(self, db):
        observed = []

        def get(url, timeout):
            observed.append((scan_lock.locked(), db.in_transaction()))
            return fake_response(ISS_TLE)

        with mock.patch.object(ingestion.requests, "get", side_effect=get):
            fetch_feed_data(db)

        assert observed == [(False, False)]
        assert active_norad_ids(db) == ["25544"]
