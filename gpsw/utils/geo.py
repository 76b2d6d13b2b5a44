# gpsw/utils/geo.py

"""
Geospatial utility functions.
"""

import math
from typing import Iterable

METRES_PER_DEGREE = 111320.0  # flat-earth scale for one degree of latitude
METRES_PER_FOOT = 0.3048


def distance3d(a, b) -> float:
    """
    Compute the straight-line distance between two observations.

    Uses a local flat-earth projection: one degree of latitude is a fixed
    number of metres, and a degree of longitude is scaled by the cosine of
    the *earlier* point's latitude. Altitudes are given in feet.

    Parameters
    ----------
    a
        Earlier observation (anything with ``lat``, ``lon``, ``altitude_ft``).
    b
        Later observation.

    Returns
    -------
    float
        Distance between A and B in metres.
    """
    lat_dist = (b.lat - a.lat) * METRES_PER_DEGREE
    lon_dist = (b.lon - a.lon) * METRES_PER_DEGREE * math.cos(math.radians(a.lat))
    horizontal = math.sqrt(lat_dist**2 + lon_dist**2)

    alt_a = a.altitude_ft * METRES_PER_FOOT
    alt_b = b.altitude_ft * METRES_PER_FOOT
    alt_diff = alt_b - alt_a
    return math.sqrt(horizontal**2 + alt_diff**2)


def windowed_distance(points: Iterable) -> int:
    """
    Sum consecutive-pair distances in the given order and round up to whole metres.
    """
    total = 0.0
    prev = None
    for p in points:
        if prev is not None:
            total += distance3d(prev, p)
        prev = p
    return int(math.ceil(total))
