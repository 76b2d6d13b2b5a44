"""
Per-tracker rolling windows and windowed distance.

Each tracker owns a FIFO of recent observations. Observations are kept in
the order they were ingested, even when their timestamps arrive out of
order; staleness is handled only by evicting from the front.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Optional, Tuple

from gpsw.analysis.types import TrackerWindow
from gpsw.utils.geo import windowed_distance
from gpsw.utils.log import get_logger
from gpsw.utils.validate import Observation

logger = get_logger(__name__)

WINDOW_MS = 300_000  # five minutes


class WindowAggregator:
    """
    Thread-safe owner of every tracker's window.

    Different trackers may be ingested concurrently; all work on one
    tracker's window is serialized by that window's lock. ``reset`` retires
    every window, so an ingest racing a reset lands in a fresh window.
    """

    def __init__(self, window_ms: int = WINDOW_MS, clock: Optional[Callable[[], int]] = None) -> None:
        """
        Parameters
        ----------
        window_ms
            Maximum age (ms) of a retained observation.
        clock
            Millisecond clock used as "now" for eviction. When omitted the
            timestamp of the observation being ingested is used.
        """
        self.window_ms = window_ms
        self._clock = clock
        self._registry_lock = threading.Lock()
        self._windows: Dict[str, TrackerWindow] = {}

    def _window_for(self, tracker_id: str) -> TrackerWindow:
        with self._registry_lock:
            win = self._windows.get(tracker_id)
            if win is None:
                win = TrackerWindow(tracker_id)
                self._windows[tracker_id] = win
            return win

    def ingest(self, tracker_id: str, obs: Observation) -> int:
        """
        Append an observation to its tracker's window and recompute the distance.

        Returns
        -------
        int
            Windowed distance in whole metres (0 for fewer than two points).
        """
        while True:
            win = self._window_for(tracker_id)
            with win.lock:
                if win.retired:
                    continue
                win.points.append(obs)
                now = self._clock() if self._clock is not None else obs.timestamp_ms
                self._evict(win, now)
                win.distance_m = windowed_distance(win.points) if len(win.points) >= 2 else 0
                return win.distance_m

    def _evict(self, win: TrackerWindow, now: int) -> None:
        evicted = 0
        while win.points and now - win.points[0].timestamp_ms > self.window_ms:
            win.points.popleft()
            evicted += 1
        if evicted:
            logger.debug("Evicted %d stale observations for %s", evicted, win.tracker_id)

    def distance(self, tracker_id: str) -> int:
        with self._registry_lock:
            win = self._windows.get(tracker_id)
        if win is None:
            return 0
        with win.lock:
            return win.distance_m

    def window(self, tracker_id: str) -> Tuple[Observation, ...]:
        """
        Snapshot of a tracker's window in stored order.
        """
        with self._registry_lock:
            win = self._windows.get(tracker_id)
        if win is None:
            return ()
        with win.lock:
            return tuple(win.points)

    def tracker_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._windows)

    def reset(self) -> None:
        """
        Drop every window and cached distance.
        """
        with self._registry_lock:
            windows = list(self._windows.values())
            self._windows.clear()
            for win in windows:
                with win.lock:
                    win.retired = True
                    win.points.clear()
                    win.distance_m = 0
        logger.info("Reset %d tracker windows", len(windows))
