"""
Route incoming observations through the window aggregator, the spatial
filter and the latest-event tracker, and publish results to a sink.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from gpsw.analysis.config import EngineConfig
from gpsw.analysis.debounce import LatestEventTracker
from gpsw.analysis.filter import SpatialFilter, in_range
from gpsw.analysis.window import WindowAggregator
from gpsw.storage.board import PresentationSink
from gpsw.utils.log import get_logger, with_context
from gpsw.utils.validate import Observation

logger = get_logger(__name__)


class Dispatcher:
    """
    Stateful wiring between the event source, the engine state and the sink.
    """

    def __init__(
        self,
        cfg: EngineConfig,
        sink: PresentationSink,
        aggregator: Optional[WindowAggregator] = None,
        spatial_filter: Optional[SpatialFilter] = None,
        latest: Optional[LatestEventTracker] = None,
    ) -> None:
        self.cfg = cfg
        self.sink = sink
        self.aggregator = aggregator or WindowAggregator(cfg.window_ms)
        self.filter = spatial_filter or SpatialFilter()
        self.latest = latest or LatestEventTracker(cfg.idle_s)
        self._known = frozenset(cfg.tracker_ids)
        self._commit_lock = threading.Lock()
        self._generation = 0
        self._unsubs: List[Callable[[], None]] = [
            self.filter.labels.listen(sink.on_filter_label),
            self.latest.cell.listen(sink.on_latest_event),
        ]

    def handle(self, obs: Observation) -> None:
        """
        Process one observation from any tracker.
        """
        if obs.tracker_id not in self._known:
            logger.debug("Dropping observation for unknown tracker %s", obs.tracker_id)
            return

        self.sink.on_tracker_update(obs.tracker_id, obs.lat, obs.lon)
        self.latest.push(obs)

        with self._commit_lock:
            generation = self._generation
        if not in_range(self.filter.sample_bounds(), obs.lat, obs.lon):
            return
        # a commit since the generation read makes this step stale
        with self._commit_lock:
            if generation != self._generation:
                with_context(logger, tracker_id=obs.tracker_id, generation=generation).debug(
                    "Discarding observation that straddled a commit"
                )
                return
            distance_m = self.aggregator.ingest(obs.tracker_id, obs)
            self.sink.on_filtered_tracker_update(obs.tracker_id, obs.lat, obs.lon, distance_m)

    def commit(self) -> Optional[str]:
        """
        Clear all windows and the filtered view, then commit the filter.

        Returns
        -------
        Optional[str]
            The published label, or None when both halves were invalid.
        """
        with self._commit_lock:
            self._generation += 1
            self.aggregator.reset()
            self.sink.on_filter_reset()
            with_context(logger, generation=self._generation).info("Windows reset for commit")
            return self.filter.commit()

    def attach(self, source) -> None:
        """
        Subscribe to a source exposing ``listen(callback)``.
        """
        self._unsubs.append(source.listen(self.handle))

    def close(self) -> None:
        self.latest.cancel()
        for unsub in self._unsubs:
            unsub()
        self._unsubs.clear()
