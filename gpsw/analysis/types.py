# gpsw/analysis/types.py

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, NamedTuple, Optional, Tuple

from gpsw.utils.validate import Observation


@dataclass
class TrackerWindow:
    """
    Rolling FIFO of one tracker's recent observations.

    Parameters
    ----------
    tracker_id : str
        Tracker that owns this window.
    points : Deque[Observation]
        Observations in arrival order (not time order).
    distance_m : int
        Windowed distance computed at the last insertion.
    retired : bool
        Set when the aggregator is reset; a retired window takes no inserts.
    lock : threading.Lock
        Serializes every read and write of this window.
    """
    tracker_id: str
    points: Deque[Observation] = field(default_factory=deque)
    distance_m: int = 0
    retired: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class FilterBounds(NamedTuple):
    """Live bound values; None means no constraint on that side."""
    min_lat: Optional[float] = None
    max_lat: Optional[float] = None
    min_lon: Optional[float] = None
    max_lon: Optional[float] = None


class FilterCommit(NamedTuple):
    """
    Validated snapshot taken when the filter is committed.

    ``lat_range`` / ``lon_range`` hold the rounded bounds of a valid half,
    or None when that half is unset or invalid.
    """
    bounds: FilterBounds
    lat_range: Optional[Tuple[int, int]]
    lon_range: Optional[Tuple[int, int]]
    label: Optional[str]
