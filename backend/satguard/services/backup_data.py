"""
Built-in backup catalogue.

Used when the orbital-data feed is unreachable or for demos. Positions are
fixed geodetic states, arranged so that one pair is a CRITICAL approach
(1.5 km), one a WARNING (2.8 km) and one INFO (4.2 km); every other pair is
thousands of kilometres apart.
"""

BACKUP_SATELLITES = [
    # norad_id, name, latitude (deg), longitude (deg), altitude (km)
    ("25544", "ISS (ZARYA)", 0.0, 0.0, 420.0),
    ("48274", "CSS (TIANHE)", 0.0, 0.0, 421.5),
    ("20580", "HST", 0.0, 90.0, 540.0),
    ("43013", "NOAA 20", 0.0, 90.0, 542.8),
    ("25338", "NOAA 15", 0.0, 180.0, 807.0),
    ("33591", "NOAA 19", 0.0, 180.0, 811.2),
    ("27424", "AQUA", 45.0, -100.0, 705.0),
    ("25994", "TERRA", -45.0, 60.0, 705.0),
]
