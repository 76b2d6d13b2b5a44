# gpsw/analysis/config.py

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """
    Configuration for the tracker windowing engine and its simulator.

    Attributes
    ----------
    window_ms
        Depth (ms) of each tracker's rolling window.
    idle_s
        Silence (s) after which the latest-event view reverts to idle.
    tracker_count
        Number of trackers; ids are ``{tracker_prefix}{index}``.
    tracker_prefix
        Prefix for generated tracker ids.
    sim_min_interval_s
        Shortest pause (s) between two simulated reports of one tracker.
    sim_max_interval_s
        Longest pause (s) between two simulated reports of one tracker.
    sim_burst_prob
        Probability that a simulated tracker fires its next report immediately.
    """
    window_ms:          int   = 300_000
    idle_s:             float = 3.0
    tracker_count:      int   = 10
    tracker_prefix:     str   = "Tracker"
    sim_min_interval_s: float = 0.5
    sim_max_interval_s: float = 6.0
    sim_burst_prob:     float = 0.1

    def __post_init__(self) -> None:
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")
        if self.idle_s <= 0:
            raise ValueError(f"idle_s must be positive, got {self.idle_s}")
        if self.tracker_count <= 0:
            raise ValueError(f"tracker_count must be positive, got {self.tracker_count}")
        if not 0 <= self.sim_min_interval_s <= self.sim_max_interval_s:
            raise ValueError("simulator intervals must satisfy 0 <= min <= max")

    @property
    def tracker_ids(self) -> list[str]:
        return [f"{self.tracker_prefix}{i}" for i in range(self.tracker_count)]

    @classmethod
    def default(cls):
        """Preset matching the live feed (5-minute window, 3 s idle)."""
        return cls()

    @classmethod
    def quick(cls):
        """Preset for demos: one-minute window and a chattier simulator."""
        return cls(
            window_ms=60_000,
            sim_min_interval_s=0.1,
            sim_max_interval_s=1.5,
            sim_burst_prob=0.25,
        )
