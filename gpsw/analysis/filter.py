"""
Spatial filter: four independently editable bounds and an explicit commit.

Bounds are sampled raw for per-observation range tests. Committing
validates each half (latitude, longitude) on its own and publishes a label
built from the rounded bounds.
"""

from __future__ import annotations

import math
import threading
from typing import Optional, Tuple

from gpsw.analysis.reactive import Cell, Stream
from gpsw.analysis.types import FilterBounds, FilterCommit
from gpsw.utils.log import get_logger
from gpsw.utils.validate import parse_bound

logger = get_logger(__name__)

NOT_SET = "not set"
LAT_LIMIT = 90.0
LON_LIMIT = 180.0
BOUND_FIELDS = ("min_lat", "max_lat", "min_lon", "max_lon")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_half(lo: Optional[float], hi: Optional[float], limit: float) -> Optional[Tuple[int, int]]:
    """
    Validate one half of the filter.

    Parameters
    ----------
    lo, hi
        Raw min/max bounds, None when unset.
    limit
        Absolute physical limit (90 for latitude, 180 for longitude).

    Returns
    -------
    Optional[Tuple[int, int]]
        Rounded (min, max) when both are set, inside the limit and ordered
        after rounding; otherwise None.
    """
    if lo is None or hi is None:
        return None
    if not (-limit <= lo <= limit and -limit <= hi <= limit):
        return None
    lo_r, hi_r = round_half_up(lo), round_half_up(hi)
    if lo_r > hi_r:
        return None
    return lo_r, hi_r


def format_label(lat_range: Optional[Tuple[int, int]], lon_range: Optional[Tuple[int, int]]) -> str:
    lat_text = f"{lat_range[0]}~{lat_range[1]}" if lat_range is not None else NOT_SET
    lon_text = f"{lon_range[0]}~{lon_range[1]}" if lon_range is not None else NOT_SET
    return f"Current Latitude: {lat_text} | Current Longitude: {lon_text}"


def in_range(bounds: FilterBounds, lat: float, lon: float) -> bool:
    """
    Whether a position lies inside the live (raw, unrounded) bounds.

    An unset bound never excludes a position on its side.
    """
    in_lat = (bounds.min_lat is None or lat >= bounds.min_lat) and (bounds.max_lat is None or lat <= bounds.max_lat)
    in_lon = (bounds.min_lon is None or lon >= bounds.min_lon) and (bounds.max_lon is None or lon <= bounds.max_lon)
    return in_lat and in_lon


class SpatialFilter:
    """
    Holds the four bound cells and produces validated labels on commit.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.min_lat: Cell[Optional[float]] = Cell(None)
        self.max_lat: Cell[Optional[float]] = Cell(None)
        self.min_lon: Cell[Optional[float]] = Cell(None)
        self.max_lon: Cell[Optional[float]] = Cell(None)
        self.labels: Stream[str] = Stream()
        self.last_commit: Optional[FilterCommit] = None

    @property
    def bound_cells(self) -> dict[str, Cell]:
        return {name: getattr(self, name) for name in BOUND_FIELDS}

    def _set(self, name: str, value: Optional[float]) -> None:
        with self._lock:
            getattr(self, name).send(value)

    def set_min_lat(self, value: Optional[float]) -> None:
        self._set("min_lat", value)

    def set_max_lat(self, value: Optional[float]) -> None:
        self._set("max_lat", value)

    def set_min_lon(self, value: Optional[float]) -> None:
        self._set("min_lon", value)

    def set_max_lon(self, value: Optional[float]) -> None:
        self._set("max_lon", value)

    def set_bounds(self, **values: Optional[float]) -> None:
        """
        Set several bounds at once, e.g. ``set_bounds(min_lat=10, max_lat=20)``.
        """
        unknown = set(values) - set(BOUND_FIELDS)
        if unknown:
            raise KeyError(f"Unknown bounds: {sorted(unknown)}")
        with self._lock:
            for name, value in values.items():
                self._set(name, value)

    def set_from_text(self, name: str, text: Optional[str]) -> Optional[float]:
        """
        Set a bound from raw input text; unparsable text unsets it.
        """
        value = parse_bound(text)
        self.set_bounds(**{name: value})
        return value

    def sample_bounds(self) -> FilterBounds:
        with self._lock:
            return FilterBounds(
                self.min_lat.sample(),
                self.max_lat.sample(),
                self.min_lon.sample(),
                self.max_lon.sample(),
            )

    def commit(self) -> Optional[str]:
        """
        Validate a snapshot of the bounds and publish its label.

        Returns
        -------
        Optional[str]
            The label, or None when both halves are unset or invalid (in
            which case nothing is published).
        """
        bounds = self.sample_bounds()
        lat_range = validate_half(bounds.min_lat, bounds.max_lat, LAT_LIMIT)
        lon_range = validate_half(bounds.min_lon, bounds.max_lon, LON_LIMIT)
        label = None
        if lat_range is not None or lon_range is not None:
            label = format_label(lat_range, lon_range)
        self.last_commit = FilterCommit(bounds, lat_range, lon_range, label)

        if label is None:
            logger.info("Filter commit rejected: %s", bounds)
            return None
        logger.info("Filter committed: %s", label)
        self.labels.send(label)
        return label
