"""
Simulated GPS feed: one random-walk producer per tracker.

Each tracker reports at irregular, occasionally bursty intervals from its
own thread; all reports are fanned out through a single merged stream.
"""

from __future__ import annotations

import random
import threading
import time
from typing import Callable, Iterator, List, Optional

from gpsw.analysis.config import EngineConfig
from gpsw.analysis.reactive import Stream
from gpsw.utils.log import get_logger, with_context
from gpsw.utils.validate import Observation

logger = get_logger(__name__)

STEP_DEG = 0.01       # max lat/lon change per report
STEP_ALT_FT = 150.0   # max altitude change per report
MAX_ALT_FT = 40_000.0


def _now_ms() -> int:
    return int(time.time() * 1000)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class GpsSimulator:
    """
    Stand-in for the external tracker feed.
    """

    def __init__(self, cfg: EngineConfig, seed: Optional[int] = None, clock: Callable[[], int] = _now_ms) -> None:
        self.cfg = cfg
        self.seed = seed
        self.clock = clock
        self.merged: Stream[Observation] = Stream()
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    def _rng(self, tracker_id: str) -> random.Random:
        if self.seed is None:
            return random.Random()
        return random.Random(f"{self.seed}:{tracker_id}")

    def stream_of(self, tracker_id: str) -> Iterator[Observation]:
        """
        Lazily yield an unbounded random walk for one tracker.

        Parameters
        ----------
        tracker_id
            Tracker to simulate; need not be a configured id.
        """
        rng = self._rng(tracker_id)
        lat = rng.uniform(-60.0, 60.0)
        lon = rng.uniform(-170.0, 170.0)
        alt = rng.uniform(0.0, 10_000.0)
        while True:
            yield Observation(
                tracker_id=tracker_id,
                lat=round(lat, 6),
                lon=round(lon, 6),
                altitude_ft=round(alt, 1),
                timestamp_ms=self.clock(),
            )
            lat = _clamp(lat + rng.uniform(-STEP_DEG, STEP_DEG), -90.0, 90.0)
            lon = _clamp(lon + rng.uniform(-STEP_DEG, STEP_DEG), -180.0, 180.0)
            alt = _clamp(alt + rng.uniform(-STEP_ALT_FT, STEP_ALT_FT), 0.0, MAX_ALT_FT)

    def listen(self, fn: Callable[[Observation], None]) -> Callable[[], None]:
        return self.merged.listen(fn)

    def _pause(self, rng: random.Random) -> float:
        if rng.random() < self.cfg.sim_burst_prob:
            return 0.0
        return rng.uniform(self.cfg.sim_min_interval_s, self.cfg.sim_max_interval_s)

    def _produce(self, tracker_id: str) -> None:
        rng = self._rng(f"pace:{tracker_id}")
        log = with_context(logger, tracker_id=tracker_id)
        log.debug("Producer started")
        for obs in self.stream_of(tracker_id):
            if self._stop.is_set():
                break
            try:
                self.merged.send(obs)
            except Exception:
                log.exception("Listener failed")
            if self._stop.wait(self._pause(rng)):
                break

    def start(self) -> None:
        """
        Spawn one daemon producer thread per configured tracker.
        """
        if self._threads:
            raise RuntimeError("Simulator already started")
        self._stop.clear()
        for tracker_id in self.cfg.tracker_ids:
            t = threading.Thread(target=self._produce, args=(tracker_id,), name=f"sim-{tracker_id}", daemon=True)
            t.start()
            self._threads.append(t)
        logger.info("Simulator started with %d trackers", len(self._threads))

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads.clear()
        logger.info("Simulator stopped")
