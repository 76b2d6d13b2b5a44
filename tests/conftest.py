import pytest

from gpsw.storage.board import PresentationSink
from gpsw.utils.validate import Observation


class FakeTimer:
    """
    Manual stand-in for threading.Timer; fire() runs the callback.
    """
    created: list = []

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


class RecordingSink(PresentationSink):
    def __init__(self):
        self.calls = []

    def on_tracker_update(self, tracker_id, lat, lon):
        self.calls.append(("tracker", tracker_id, lat, lon))

    def on_filtered_tracker_update(self, tracker_id, lat, lon, distance_m):
        self.calls.append(("filtered", tracker_id, lat, lon, distance_m))

    def on_latest_event(self, obs):
        self.calls.append(("event", obs))

    def on_filter_label(self, label):
        self.calls.append(("label", label))

    def on_filter_reset(self):
        self.calls.append(("reset",))

    def of(self, kind):
        return [c for c in self.calls if c[0] == kind]


def obs(tracker_id="Tracker1", lat=10.0, lon=20.0, alt=1000.0, ts=0):
    return Observation(tracker_id=tracker_id, lat=lat, lon=lon, altitude_ft=alt, timestamp_ms=ts)


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    return FakeTimer


@pytest.fixture
def sink():
    return RecordingSink()
