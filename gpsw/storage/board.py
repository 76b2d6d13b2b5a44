"""
In-memory presentation state fed by the dispatcher.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from gpsw.analysis.filter import format_label
from gpsw.utils.log import get_logger
from gpsw.utils.validate import FilteredTrackerRow, LatestEvent, Observation, TrackerRow

logger = get_logger(__name__)

IDLE_TEXT = "No Events"


class PresentationSink:
    """
    Receiver for everything the engine publishes. Methods are no-ops here.
    """

    def on_tracker_update(self, tracker_id: str, lat: float, lon: float) -> None:
        pass

    def on_filtered_tracker_update(self, tracker_id: str, lat: float, lon: float, distance_m: int) -> None:
        pass

    def on_latest_event(self, obs: Optional[Observation]) -> None:
        pass

    def on_filter_label(self, label: str) -> None:
        pass

    def on_filter_reset(self) -> None:
        pass


def event_text(obs: Optional[Observation]) -> str:
    if obs is None:
        return IDLE_TEXT
    return f"{obs.tracker_id}, {obs.lat}, {obs.lon}, {obs.altitude_ft}"


class TrackerBoard(PresentationSink):
    """
    Holds the two tracker tables, the current event and the filter label.

    Rows are kept in the configured tracker order and start out empty.
    """

    def __init__(self, tracker_ids: Iterable[str]) -> None:
        self._lock = threading.Lock()
        self.tracker_ids = list(tracker_ids)
        self._rows = {t: TrackerRow(tracker_id=t) for t in self.tracker_ids}
        self._filtered = {t: FilteredTrackerRow(tracker_id=t) for t in self.tracker_ids}
        self._event: Optional[Observation] = None
        self._label = format_label(None, None)

    def on_tracker_update(self, tracker_id: str, lat: float, lon: float) -> None:
        with self._lock:
            if tracker_id in self._rows:
                self._rows[tracker_id] = TrackerRow(tracker_id=tracker_id, lat=lat, lon=lon)

    def on_filtered_tracker_update(self, tracker_id: str, lat: float, lon: float, distance_m: int) -> None:
        with self._lock:
            if tracker_id in self._filtered:
                self._filtered[tracker_id] = FilteredTrackerRow(
                    tracker_id=tracker_id, lat=lat, lon=lon, distance_m=distance_m
                )

    def on_latest_event(self, obs: Optional[Observation]) -> None:
        with self._lock:
            self._event = obs

    def on_filter_label(self, label: str) -> None:
        with self._lock:
            self._label = label

    def on_filter_reset(self) -> None:
        with self._lock:
            self._filtered = {t: FilteredTrackerRow(tracker_id=t) for t in self.tracker_ids}
        logger.info("Cleared filtered tracker table")

    def trackers(self) -> list[TrackerRow]:
        with self._lock:
            return [self._rows[t] for t in self.tracker_ids]

    def filtered(self) -> list[FilteredTrackerRow]:
        with self._lock:
            return [self._filtered[t] for t in self.tracker_ids]

    def latest_event(self) -> LatestEvent:
        with self._lock:
            obs = self._event
        return LatestEvent(idle=obs is None, text=event_text(obs), observation=obs)

    @property
    def filter_label(self) -> str:
        with self._lock:
            return self._label
