from datetime import datetime, timedelta

import numpy as np
import pytest

from satguard.core.errors import DataQualityError
from satguard.models.satellite import Satellite
from satguard.services.ingestion import parse_tle_text
from satguard.services.propagation import (
    ecef_to_geodetic,
    ecef_to_teme,
    geodetic_to_ecef,
    gmst,
    julian_date,
    resolve_catalog,
    resolve_position,
    teme_to_ecef,
)

from conftest import ISS_EPOCH, ISS_TLE, SCAN_TIME


def iss_satellite():
    rec = parse_tle_text(ISS_TLE)[0]
    return Satellite(norad_id=rec.norad_id, name=rec.name, line1=rec.line1, line2=rec.line2, epoch=rec.epoch)


class TestFrames:
    def test_geodetic_round_trip(self):
        r = geodetic_to_ecef(45.0, -100.0, 705.0)
        lat, lon, alt = ecef_to_geodetic(*r)
        assert lat == pytest.approx(45.0, abs=1e-4)
        assert lon == pytest.approx(-100.0, abs=1e-6)
        assert alt == pytest.approx(705.0, abs=1e-3)

    def test_equator_altitude_is_radial(self):
        low = geodetic_to_ecef(0.0, 0.0, 500.0)
        high = geodetic_to_ecef(0.0, 0.0, 501.5)
        assert np.linalg.norm(high - low) == pytest.approx(1.5, abs=1e-9)

    def test_teme_ecef_inverse(self):
        angle = gmst(*julian_date(SCAN_TIME))
        r = np.array([6800.0, -1200.0, 300.0])
        back = teme_to_ecef(ecef_to_teme(r, angle), angle)
        assert np.allclose(back, r)

    def test_gmst_in_range(self):
        angle = gmst(*julian_date(SCAN_TIME))
        assert 0.0 <= angle < 2 * np.pi


class TestResolvePosition:
    def test_tle_near_epoch(self):
        pos = resolve_position(iss_satellite(), ISS_EPOCH + timedelta(minutes=20))
        assert pos.norad_id == "25544"
        assert 350.0 < pos.altitude < 450.0
        assert -51.7 <= pos.latitude <= 51.7
        assert np.linalg.norm(pos.eci) == pytest.approx(6378.137 + pos.altitude, abs=30.0)

    def test_deterministic(self):
        at = ISS_EPOCH + timedelta(hours=1)
        first = resolve_position(iss_satellite(), at)
        second = resolve_position(iss_satellite(), at)
        assert np.array_equal(first.eci, second.eci)
        assert first.latitude == second.latitude

    def test_stale_epoch_rejected(self):
        with pytest.raises(DataQualityError) as exc:
            resolve_position(iss_satellite(), ISS_EPOCH + timedelta(days=45))
        assert exc.value.norad_id == "25544"

    def test_epoch_bound_is_configurable(self):
        at = ISS_EPOCH + timedelta(days=45)
        pos = resolve_position(iss_satellite(), at, max_epoch_age=timedelta(days=60))
        assert pos.altitude > 0

    def test_stored_state(self):
        sat = Satellite(norad_id="1", name="FIXED", latitude=10.0, longitude=20.0, altitude=600.0)
        pos = resolve_position(sat, SCAN_TIME)
        assert (pos.latitude, pos.longitude, pos.altitude) == (10.0, 20.0, 600.0)
        assert np.linalg.norm(pos.eci) == pytest.approx(np.linalg.norm(geodetic_to_ecef(10.0, 20.0, 600.0)))

    def test_no_orbital_data(self):
        with pytest.raises(DataQualityError):
            resolve_position(Satellite(norad_id="2", name="EMPTY"), SCAN_TIME)

    def test_incomplete_state(self):
        sat = Satellite(norad_id="3", name="HALF", latitude=10.0, longitude=None, altitude=500.0)
        with pytest.raises(DataQualityError):
            resolve_position(sat, SCAN_TIME)

    def test_latitude_out_of_range(self):
        sat = Satellite(norad_id="4", name="BAD", latitude=95.0, longitude=0.0, altitude=500.0)
        with pytest.raises(DataQualityError):
            resolve_position(sat, SCAN_TIME)


def test_resolve_catalog_skips_bad_satellites():
    good = Satellite(norad_id="1", name="GOOD", latitude=0.0, longitude=0.0, altitude=500.0)
    bad = Satellite(norad_id="2", name="BAD")
    resolved, failures = resolve_catalog([good, bad], SCAN_TIME)
    assert [sat.norad_id for sat, _ in resolved] == ["1"]
    assert [f.norad_id for f in failures] == ["2"]


def test_resolve_catalog_same_instant_same_frame():
    # Two fixed satellites keep their separation whatever the evaluation time
    a = Satellite(norad_id="1", name="A", latitude=0.0, longitude=0.0, altitude=500.0)
    b = Satellite(norad_id="2", name="B", latitude=0.0, longitude=0.0, altitude=503.0)
    for at in (SCAN_TIME, datetime(2026, 7, 4, 3, 15)):
        (_, pa), (_, pb) = resolve_catalog([a, b], at)[0]
        assert np.linalg.norm(pa.eci - pb.eci) == pytest.approx(3.0, abs=1e-9)
