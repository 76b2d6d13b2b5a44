import pytest
from pydantic import ValidationError

from gpsw.utils.validate import Observation, parse_bound
from conftest import obs


def test_observation_is_immutable():
    o = obs()
    with pytest.raises(ValidationError):
        o.lat = 5.0


@pytest.mark.parametrize("lat,lon", [(90.1, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0)])
def test_observation_ranges(lat, lon):
    with pytest.raises(ValidationError):
        Observation(tracker_id="Tracker0", lat=lat, lon=lon, altitude_ft=0.0, timestamp_ms=0)


@pytest.mark.parametrize("raw,expected", [
    ("12", 12.0),
    ("-7", -7.0),
    ("3.5", 3.5),
    ("", None),
    ("-", None),
    ("abc", None),
    ("inf", None),
    (None, None),
    (4, 4.0),
])
def test_parse_bound(raw, expected):
    assert parse_bound(raw) == expected
