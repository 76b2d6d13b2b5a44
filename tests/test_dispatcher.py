"""
Tests for observation routing and filter commits.
"""

import threading

import pytest

from gpsw.analysis.config import EngineConfig
from gpsw.analysis.debounce import LatestEventTracker
from gpsw.analysis.dispatcher import Dispatcher
from gpsw.analysis.filter import SpatialFilter
from gpsw.analysis.reactive import Stream
from conftest import obs


@pytest.fixture
def dispatcher(sink, fake_timer):
    cfg = EngineConfig.default()
    d = Dispatcher(cfg, sink, latest=LatestEventTracker(cfg.idle_s, timer_factory=fake_timer))
    yield d
    d.close()


class TestHandle:

    def test_unbounded_filter_accepts_everything(self, dispatcher, sink):
        a = obs(lat=10.0, lon=20.0, alt=1000.0, ts=0)
        b = obs(lat=11.0, lon=21.0, alt=2000.0, ts=1000)
        dispatcher.handle(a)
        dispatcher.handle(b)
        assert sink.of("tracker") == [("tracker", "Tracker1", 10.0, 20.0), ("tracker", "Tracker1", 11.0, 21.0)]
        assert sink.of("filtered") == [
            ("filtered", "Tracker1", 10.0, 20.0, 0),
            ("filtered", "Tracker1", 11.0, 21.0, 156240),
        ]
        assert sink.of("event") == [("event", a), ("event", b)]

    def test_unknown_tracker_dropped(self, dispatcher, sink):
        dispatcher.handle(obs("Tracker99"))
        assert sink.calls == []
        assert dispatcher.aggregator.tracker_ids() == []

    def test_out_of_range_skips_window(self, dispatcher, sink):
        dispatcher.filter.set_bounds(min_lat=50)
        dispatcher.handle(obs(lat=10.0))
        assert len(sink.of("tracker")) == 1
        assert sink.of("filtered") == []
        assert dispatcher.aggregator.window("Tracker1") == ()

    def test_bounds_sampled_live_without_commit(self, dispatcher, sink):
        dispatcher.handle(obs(lat=10.0, ts=0))
        dispatcher.filter.set_max_lat(5)
        dispatcher.handle(obs(lat=11.0, ts=1))
        assert len(sink.of("filtered")) == 1

    def test_idle_reversion_reaches_sink(self, dispatcher, sink, fake_timer):
        dispatcher.handle(obs())
        fake_timer.created[-1].fire()
        assert sink.calls[-1] == ("event", None)

    def test_attach_to_source(self, dispatcher, sink):
        class Source:
            def __init__(self):
                self.merged = Stream()

            def listen(self, fn):
                return self.merged.listen(fn)

        src = Source()
        dispatcher.attach(src)
        src.merged.send(obs("Tracker3"))
        assert sink.of("tracker") == [("tracker", "Tracker3", 10.0, 20.0)]
        dispatcher.close()
        src.merged.send(obs("Tracker4"))
        assert len(sink.of("tracker")) == 1


class TestCommit:

    def test_commit_resets_windows_and_publishes(self, dispatcher, sink):
        dispatcher.handle(obs(lat=10.0, lon=20.0, alt=1000.0, ts=0))
        dispatcher.handle(obs(lat=11.0, lon=21.0, alt=2000.0, ts=1000))
        dispatcher.filter.set_bounds(min_lat=0, max_lat=45, min_lon=0, max_lon=90)
        label = dispatcher.commit()

        assert label == "Current Latitude: 0~45 | Current Longitude: 0~90"
        assert sink.calls[-2:] == [("reset",), ("label", label)]
        assert dispatcher.aggregator.tracker_ids() == []

        dispatcher.handle(obs(lat=11.0, lon=21.0, alt=2000.0, ts=2000))
        assert sink.of("filtered")[-1] == ("filtered", "Tracker1", 11.0, 21.0, 0)

    def test_invalid_commit_still_resets(self, dispatcher, sink):
        dispatcher.handle(obs())
        dispatcher.filter.set_bounds(min_lat=10, max_lat=5, min_lon=-200, max_lon=0)
        assert dispatcher.commit() is None
        assert sink.of("label") == []
        assert sink.calls[-1] == ("reset",)
        assert dispatcher.aggregator.tracker_ids() == []


class CommittingFilter(SpatialFilter):
    """
    Runs a commit from another thread the first time bounds are sampled.
    """

    def __init__(self):
        super().__init__()
        self.dispatcher = None
        self.armed = False

    def sample_bounds(self):
        if self.armed:
            self.armed = False
            t = threading.Thread(target=self.dispatcher.commit)
            t.start()
            t.join()
        return super().sample_bounds()


class TestCommitStraddle:

    @pytest.fixture
    def straddled(self, sink, fake_timer):
        cfg = EngineConfig.default()
        spatial = CommittingFilter()
        d = Dispatcher(
            cfg, sink,
            spatial_filter=spatial,
            latest=LatestEventTracker(cfg.idle_s, timer_factory=fake_timer),
        )
        spatial.dispatcher = d
        yield d, spatial
        d.close()

    def test_step_interrupted_by_commit_is_discarded(self, straddled, sink):
        dispatcher, spatial = straddled
        dispatcher.handle(obs(lat=10.0, lon=20.0, alt=1000.0, ts=0))
        spatial.armed = True
        dispatcher.handle(obs(lat=11.0, lon=21.0, alt=2000.0, ts=1000))

        assert dispatcher.aggregator.window("Tracker1") == ()
        assert sink.calls[-1] == ("reset",)
        assert len(sink.of("filtered")) == 1

    def test_tracker_after_straddled_commit_starts_fresh(self, straddled, sink):
        dispatcher, spatial = straddled
        dispatcher.handle(obs(lat=10.0, lon=20.0, alt=1000.0, ts=0))
        spatial.armed = True
        dispatcher.handle(obs(lat=11.0, lon=21.0, alt=2000.0, ts=1000))
        dispatcher.handle(obs(lat=10.0, lon=20.0, alt=1000.0, ts=2000))

        assert sink.of("filtered")[-1] == ("filtered", "Tracker1", 10.0, 20.0, 0)
        assert [o.timestamp_ms for o in dispatcher.aggregator.window("Tracker1")] == [2000]
