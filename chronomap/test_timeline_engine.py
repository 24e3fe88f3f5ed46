import datetime

import pytest
from PyQt5.QtTest import QTest

from chronomap.config import EngineConfig
from chronomap.data.event_model import Event
from chronomap.data.geography import equirectangular
from chronomap.timeline_engine import TimelineEngine
from chronomap.utils.error_handler import DegenerateViewport, EmptyTargetSet, GeographyAlreadyLoaded

pytestmark = pytest.mark.usefixtures('qapp')

UTC = datetime.timezone.utc


def dt(year, month, day):
    return datetime.datetime(year, month, day, tzinfo=UTC)


@pytest.fixture
def events():
    return [
        Event(dt(2021, 1, 1), "Paris", 48.85, 2.35),
        Event(dt(2021, 1, 2), "Tokyo", 35.68, 139.69),
        Event(dt(1969, 7, 20), "Moon landing", 28.5, -80.6),
        Event(dt(1492, 10, 12), "Landfall", 24.0, -74.5),
    ]


@pytest.fixture
def engine(events, domain):
    return TimelineEngine(events, 1000.0, domain=domain)


class SignalRecorder:
    """Collects emissions of the engine signals."""

    def __init__(self, engine):
        self.transforms = []
        self.ranges = []
        self.timeline = []
        self.map = []
        engine.transform_changed.connect(self.transforms.append)
        engine.visible_range_changed.connect(lambda start, end: self.ranges.append((start, end)))
        engine.timeline_clusters_changed.connect(self.timeline.append)
        engine.map_clusters_changed.connect(self.map.append)


def test_initial_clusters_cover_full_domain(engine):
    clusters = engine.timeline_clusters

    assert engine.recompute_count == 1
    assert [c.count for c in clusters] == [3, 1]
    assert clusters[1].events[0].title == "Landfall"
    assert engine.map_clusters == []


def test_go_to_date_recomputes_immediately(engine):
    recorder = SignalRecorder(engine)

    engine.go_to_date(dt(2021, 1, 1))

    assert engine.recompute_count == 2
    assert len(recorder.transforms) == 1
    assert recorder.transforms[0] is engine.transform
    assert len(recorder.timeline) == 1
    assert [c.count for c in recorder.timeline[0]] == [2]
    assert not engine.has_pending_recompute()


def test_pan_defers_clustering(engine):
    engine.go_to_date(dt(2021, 1, 1))
    recorder = SignalRecorder(engine)
    count = engine.recompute_count

    engine.pan(50.0)

    assert len(recorder.transforms) == 1
    assert len(recorder.ranges) == 1
    assert recorder.timeline == []
    assert engine.recompute_count == count
    assert engine.has_pending_recompute()

    assert engine.flush_pending()
    assert engine.recompute_count == count + 1
    assert not engine.has_pending_recompute()
    assert not engine.flush_pending()


def test_burst_of_pans_recomputes_once_with_latest_transform(engine):
    engine.go_to_date(dt(2021, 1, 1))
    recorder = SignalRecorder(engine)
    count = engine.recompute_count

    for _ in range(5):
        engine.pan(-10.0)
    QTest.qWait(250)

    assert len(recorder.transforms) == 5
    assert engine.recompute_count == count + 1
    assert len(recorder.timeline) == 1
    start, end = engine.visible_range()
    assert recorder.ranges[-1] == (start, end)


def test_wheel_zoom_is_debounced(engine):
    count = engine.recompute_count

    engine.wheel_zoom(-500, 500.0)

    assert engine.transform.scale_k == pytest.approx(2.0)
    assert engine.has_pending_recompute()
    QTest.qWait(250)
    assert engine.recompute_count == count + 1


def test_discrete_intent_cancels_pending_recompute(engine):
    engine.go_to_date(dt(2021, 1, 1))
    count = engine.recompute_count

    engine.pan(20.0)
    engine.zoom_in()

    assert engine.recompute_count == count + 1
    assert not engine.has_pending_recompute()
    QTest.qWait(150)
    assert engine.recompute_count == count + 1


def test_empty_visible_window_gives_no_clusters(engine):
    recorder = SignalRecorder(engine)

    engine.go_to_date(dt(1700, 1, 1))

    assert engine.timeline_clusters == []
    assert recorder.timeline == [[]]


def test_zoom_to_events(engine, events):
    engine.zoom_to_events(events[:2])

    start, end = engine.visible_range()
    assert start < events[0].time_value < events[1].time_value < end
    assert sum(c.count for c in engine.timeline_clusters) == 2


def test_zoom_to_no_events_fails_without_side_effects(engine):
    before = engine.transform
    count = engine.recompute_count

    with pytest.raises(EmptyTargetSet):
        engine.zoom_to_events([])

    assert engine.transform is before
    assert engine.recompute_count == count


def test_reset_zoom(engine):
    engine.go_to_date(dt(2021, 1, 1))

    engine.reset_zoom()

    assert engine.transform.scale_k == 1.0
    assert [c.count for c in engine.timeline_clusters] == [3, 1]


def test_map_clusters_after_projection_loads(engine):
    engine.go_to_date(dt(2021, 1, 1))
    recorder = SignalRecorder(engine)

    engine.set_projection(equirectangular(960.0, 480.0))

    assert [c.count for c in engine.timeline_clusters] == [2]
    assert [[e.title for e in c.events] for c in engine.map_clusters] == [["Paris"], ["Tokyo"]]
    assert len(recorder.map) == 1

    with pytest.raises(GeographyAlreadyLoaded):
        engine.set_projection(equirectangular(960.0, 480.0))


def test_resize(engine):
    count = engine.recompute_count

    engine.resize(1600.0)

    assert engine.viewport.pixel_width == 1600.0
    assert engine.recompute_count == count + 1
    with pytest.raises(DegenerateViewport):
        engine.resize(-1)


def test_events_are_not_mutated(engine, events):
    snapshot = list(events)

    engine.go_to_date(dt(2021, 1, 1))
    engine.pan(30.0)
    engine.flush_pending()

    assert events == snapshot
    assert engine.events == tuple(snapshot)


def test_axis_ticks_and_zoom_info(engine):
    engine.go_to_date(dt(2021, 1, 1))

    ticks = engine.axis_ticks(10, now=dt(2026, 10, 19))
    info = engine.zoom_info()

    assert ticks
    assert all(isinstance(label, str) for _, _, label in ticks)
    assert all(-1e-6 <= pixel <= 1000.0 + 1e-6 for _, pixel, _ in ticks)
    assert info['unit'] == 'month'
    assert info['can_zoom_in']


def test_config_drives_clustering(events, domain, tmp_path):
    config = EngineConfig(str(tmp_path / 'settings.json'))
    config.set('clustering', 'base_threshold_pixels', 5.0)
    config.set('clustering', 'min_threshold', 1.0)

    engine = TimelineEngine(events, 1000.0, domain=domain, config=config)

    assert [c.count for c in engine.timeline_clusters] == [2, 1, 1]
