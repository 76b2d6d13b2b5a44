"""
Pydantic schemas for tracker observations and the HTTP API.
"""

import math
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class Observation(BaseModel):
    """
    One timestamped position report from a tracker.
    """
    model_config = ConfigDict(frozen=True)

    tracker_id: str
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    altitude_ft: float
    timestamp_ms: int


class TrackerRow(BaseModel):
    """
    Latest raw position of one tracker (unfiltered table).
    """
    tracker_id: str
    lat: Optional[float] = None
    lon: Optional[float] = None


class FilteredTrackerRow(BaseModel):
    """
    Latest in-range position of one tracker plus its windowed distance.
    """
    tracker_id: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    distance_m: Optional[int] = None


class LatestEvent(BaseModel):
    """
    Most recent observation across all trackers, or idle.
    """
    idle: bool
    text: str
    observation: Optional[Observation] = None


class FilterState(BaseModel):
    """
    Live bound values and the last committed label.
    """
    min_lat: Optional[float] = None
    max_lat: Optional[float] = None
    min_lon: Optional[float] = None
    max_lon: Optional[float] = None
    label: str


class BoundsInput(BaseModel):
    """
    Raw bound edits as typed by a user; omitted fields are left unchanged.
    """
    min_lat: Optional[str] = None
    max_lat: Optional[str] = None
    min_lon: Optional[str] = None
    max_lon: Optional[str] = None


def parse_bound(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse a bound value; anything unparsable or non-finite means "unset".

    Parameters
    ----------
    value
        Text from an input field, a number, or None.

    Returns
    -------
    Optional[float]
        The bound, or None when no constraint applies.
    """
    if value is None:
        return None
    try:
        parsed = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed
