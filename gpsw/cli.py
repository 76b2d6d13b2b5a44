#!/usr/bin/env python3
"""
CLI entry point for the gpsw tracker toolkit.

Defines the following commands:
  gpsw run [--trackers N] [--seed S] [--port 8000] [--preset default|quick]
  gpsw simulate [--trackers N] [--seed S] [--duration SEC]
  gpsw distance LAT1 LON1 ALT1 LAT2 LON2 ALT2
  gpsw version
"""

import sys
import time
from argparse import ArgumentParser, Namespace
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version as _get_version
from typing import Optional

import uvicorn

from gpsw.utils.log import get_logger, with_context
from gpsw.utils.geo import distance3d
from gpsw.utils.validate import Observation
from gpsw.analysis.config import EngineConfig
from gpsw.analysis.dispatcher import Dispatcher
from gpsw.sources.simulator import GpsSimulator
from gpsw.storage.board import PresentationSink, TrackerBoard, event_text
from gpsw.server import create_app

logger = get_logger(__name__)

PRESETS = {
    "default": EngineConfig.default,
    "quick": EngineConfig.quick,
}


class LoggingSink(PresentationSink):
    """
    Sink that narrates engine output to the console.
    """

    def on_filtered_tracker_update(self, tracker_id: str, lat: float, lon: float, distance_m: int) -> None:
        with_context(logger, tracker_id=tracker_id).info("In range at (%.5f, %.5f), %d m in window", lat, lon, distance_m)

    def on_latest_event(self, obs: Optional[Observation]) -> None:
        logger.info("Current event: %s", event_text(obs))

    def on_filter_label(self, label: str) -> None:
        logger.info(label)


def _config(preset: str, trackers: Optional[int]) -> EngineConfig:
    cfg = PRESETS[preset]()
    if trackers is not None:
        cfg = replace(cfg, tracker_count=trackers)
    return cfg


def run(preset: str, trackers: Optional[int], seed: Optional[int], port: int) -> None:
    """
    Run the simulated feed and engine, serving the board over HTTP.

    Parameters
    ----------
    preset
        Name of the EngineConfig preset.
    trackers
        Override for the number of trackers.
    seed
        Seed for the simulator, for reproducible walks.
    port
        Port on which to serve HTTP.
    """
    cfg = _config(preset, trackers)
    logger.info("Run: preset=%s, trackers=%d, seed=%s, port=%d", preset, cfg.tracker_count, seed, port)

    board = TrackerBoard(cfg.tracker_ids)
    dispatcher = Dispatcher(cfg, board)
    sim = GpsSimulator(cfg, seed=seed)
    dispatcher.attach(sim)
    sim.start()
    try:
        app = create_app(dispatcher, board)
        uvicorn.run(app, host="127.0.0.1", port=port)
    finally:
        sim.stop()
        dispatcher.close()


def simulate(trackers: Optional[int], seed: Optional[int], duration: float) -> None:
    """
    Run the engine headless for a fixed time, logging what it publishes.
    """
    cfg = _config("quick", trackers)
    logger.info("Simulate: trackers=%d, seed=%s, duration=%.1fs", cfg.tracker_count, seed, duration)
    dispatcher = Dispatcher(cfg, LoggingSink())
    sim = GpsSimulator(cfg, seed=seed)
    dispatcher.attach(sim)
    sim.start()
    try:
        time.sleep(duration)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        sim.stop()
        dispatcher.close()
    for tracker_id in cfg.tracker_ids:
        logger.info("%s: %d m over the window", tracker_id, dispatcher.aggregator.distance(tracker_id))


def distance(lat1: float, lon1: float, alt1: float, lat2: float, lon2: float, alt2: float) -> None:
    """
    Print the 3D distance between two positions (altitudes in feet).
    """
    a = Observation(tracker_id="a", lat=lat1, lon=lon1, altitude_ft=alt1, timestamp_ms=0)
    b = Observation(tracker_id="b", lat=lat2, lon=lon2, altitude_ft=alt2, timestamp_ms=0)
    print(f"{distance3d(a, b):.3f}")


def version() -> None:
    """
    Print the installed gpsw package version.
    """
    try:
        ver = _get_version("gpsw")
    except PackageNotFoundError:
        ver = "unknown"
    logger.info("gpsw version %s", ver)


def parse_args(argv: Optional[list[str]] = None) -> Namespace:
    """
    Parse command-line arguments and return the populated namespace.
    """
    parser = ArgumentParser(prog="gpsw")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # gpsw run
    p = subparsers.add_parser("run", help="Run the simulated feed and serve the board.")
    p.add_argument("--preset", choices=sorted(PRESETS), default="default", help="Config preset.")
    p.add_argument("--trackers", type=int, help="Number of trackers.")
    p.add_argument("--seed", type=int, help="Simulator seed.")
    p.add_argument("--port", type=int, default=8000, help="Port number to serve on.")

    # gpsw simulate
    p = subparsers.add_parser("simulate", help="Run the engine headless and log its output.")
    p.add_argument("--trackers", type=int, help="Number of trackers.")
    p.add_argument("--seed", type=int, help="Simulator seed.")
    p.add_argument("--duration", type=float, default=10.0, help="Seconds to run.")

    # gpsw distance
    p = subparsers.add_parser("distance", help="3D distance between two positions.")
    for name in ("lat1", "lon1", "alt1", "lat2", "lon2", "alt2"):
        p.add_argument(name, type=float)

    # gpsw version
    subparsers.add_parser("version", help="Show gpsw version and exit.")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Entry point: dispatch to the selected subcommand.
    """
    args = parse_args(argv)
    match args.command:
        case "run":
            run(args.preset, args.trackers, args.seed, args.port)
        case "simulate":
            simulate(args.trackers, args.seed, args.duration)
        case "distance":
            distance(args.lat1, args.lon1, args.alt1, args.lat2, args.lon2, args.alt2)
        case "version":
            version()
        case _:
            sys.exit(1)


if __name__ == "__main__":
    main()
