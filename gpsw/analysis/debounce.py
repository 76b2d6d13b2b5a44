"""
Latest-event tracking with idle reversion.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from gpsw.analysis.reactive import Cell
from gpsw.utils.log import get_logger
from gpsw.utils.validate import Observation

logger = get_logger(__name__)

IDLE_S = 3.0


class LatestEventTracker:
    """
    Remembers the most recent observation across all trackers.

    Every push replaces the pending idle timer with a fresh single-shot one;
    if it fires before the next push, the latest event reverts to None.
    Thread-safe; ``timer_factory`` lets tests substitute a manual timer.
    """

    def __init__(self, idle_s: float = IDLE_S, timer_factory: Callable[..., threading.Timer] = threading.Timer) -> None:
        self.idle_s = idle_s
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._seq = 0
        self.cell: Cell[Optional[Observation]] = Cell(None)

    @property
    def latest(self) -> Optional[Observation]:
        return self.cell.sample()

    def push(self, obs: Observation) -> None:
        with self._lock:
            self._seq += 1
            seq = self._seq
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self._timer_factory(self.idle_s, self._expire, args=(seq,))
            self._timer.daemon = True
            self._timer.start()
            # every report is an event, even one equal to the last
            self.cell.send(obs, force=True)

    def _expire(self, seq: int) -> None:
        with self._lock:
            # a newer push re-armed the timer after this one was started
            if seq != self._seq:
                return
            self._timer = None
            logger.debug("No events for %.1fs, reverting to idle", self.idle_s)
            self.cell.send(None)

    def cancel(self) -> None:
        with self._lock:
            self._seq += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
