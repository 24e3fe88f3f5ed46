import datetime

import pytest

from chronomap.rendering.transform import Transform
from chronomap.rendering.viewport import Viewport
from chronomap.rendering.zoom_manager import ZoomManager
from chronomap.utils.civil_time import EARLIEST_MS, to_ms
from chronomap.utils.error_handler import DegenerateViewport, OutOfRangeInput

UTC = datetime.timezone.utc


@pytest.fixture
def viewport(domain):
    return Viewport(domain, 1000.0)


def assert_full_domain(viewport, domain):
    assert viewport.transform.scale_k == 1.0
    assert viewport.transform.translate_x == pytest.approx(0.0, abs=1e-6)
    assert viewport.visible_range()[0] == pytest.approx(domain.min, abs=1.0)


class TestZoomManager:

    def test_clamp_to_extent(self):
        zoom = ZoomManager()

        assert zoom.clamp(Transform(5.0, 0.25)) == Transform(5.0, 1.0)
        assert zoom.clamp(Transform(5.0, 5e6)) == Transform(5.0, 1e6)
        transform = Transform(5.0, 3.0)
        assert zoom.clamp(transform) is transform

    def test_wheel_factor(self):
        zoom = ZoomManager()

        assert zoom.wheel_factor(-500) == 2.0
        assert zoom.wheel_factor(500) == 0.5
        assert zoom.wheel_factor(0) == 1.0

    def test_zoom_about_anchors_pointer(self):
        zoom = ZoomManager()
        transform = Transform(-300.0, 3.0)

        zoomed = zoom.zoom_about(transform, 2.0, 400.0)

        assert zoomed.scale_k == 6.0
        assert zoomed.invert(400.0) == pytest.approx(transform.invert(400.0))

    def test_zoom_about_stops_at_extent(self):
        zoom = ZoomManager(max_scale=10.0)
        at_max = Transform(-50.0, 10.0)

        assert zoom.zoom_about(at_max, 2.0, 100.0) is at_max
        assert zoom.zoom_about(Transform(0.0, 8.0), 2.0, 100.0).scale_k == 10.0
        assert not zoom.can_zoom_in(at_max)
        assert zoom.can_zoom_out(at_max)

    def test_zoom_labels(self):
        zoom = ZoomManager()
        day = 24 * 3600 * 1000

        assert zoom.get_zoom_label(10 * day) == 'Day'
        assert zoom.get_zoom_label(2.5 * day) == '6 Hours'
        info = zoom.get_zoom_info(Transform(0.0, 2.0), 10 * day)
        assert info['unit'] == 'day'
        assert info['scale_k'] == 2.0

    def test_invalid_extent(self):
        with pytest.raises(ValueError):
            ZoomManager(min_scale=0)
        with pytest.raises(ValueError):
            ZoomManager(min_scale=10, max_scale=5)


def test_starts_at_full_domain(viewport, domain):
    assert_full_domain(viewport, domain)


def test_pan_past_domain_start_is_pinned(viewport, domain):
    viewport.pan(500.0)

    assert viewport.visible_range()[0] == pytest.approx(EARLIEST_MS, abs=1.0)
    assert_full_domain(viewport, domain)


def test_wheel_zoom_keeps_date_under_pointer(viewport):
    viewport.set_transform(Transform(-2000.0, 5.0))
    before = viewport.effective_scale().invert(300.0)

    viewport.wheel_zoom(-500, 300.0)

    assert viewport.transform.scale_k == pytest.approx(10.0)
    assert viewport.effective_scale().invert(300.0) == pytest.approx(before, abs=1.0)


def test_wheel_zoom_out_is_clamped_to_full_domain(viewport, domain):
    viewport.wheel_zoom(5000, 500.0)

    assert_full_domain(viewport, domain)


def test_zoom_buttons_default_to_center(viewport):
    viewport.set_transform(Transform(-2000.0, 5.0))
    center_before = viewport.effective_scale().invert(500.0)

    viewport.zoom_in()

    assert viewport.transform.scale_k == 10.0
    assert viewport.effective_scale().invert(500.0) == pytest.approx(center_before, abs=1.0)

    viewport.zoom_out()
    assert viewport.transform.scale_k == 5.0


def test_non_finite_intents_are_rejected(viewport):
    with pytest.raises(OutOfRangeInput):
        viewport.pan(float('nan'))
    with pytest.raises(OutOfRangeInput):
        viewport.wheel_zoom(float('inf'), 10.0)
    assert viewport.transform.scale_k == 1.0


def test_resize_keeps_visible_start(viewport):
    viewport.set_transform(Transform(-2000.0, 5.0))
    start = viewport.visible_range()[0]

    viewport.resize(1600.0)

    assert viewport.pixel_width == 1600.0
    assert viewport.transform.scale_k == 5.0
    assert viewport.visible_range()[0] == pytest.approx(start, abs=1.0)


def test_resize_rejects_degenerate_width(viewport):
    with pytest.raises(DegenerateViewport):
        viewport.resize(0)


def test_reset_returns_to_identity(viewport, domain):
    viewport.set_transform(Transform(-2000.0, 5.0))

    viewport.reset()

    assert_full_domain(viewport, domain)


def test_go_to_date_frames_a_year(viewport):
    date = datetime.datetime(2021, 7, 1, tzinfo=UTC)

    viewport.go_to_date(date)

    start, end = viewport.visible_range()
    assert end - start == pytest.approx(
        to_ms(datetime.datetime(2022, 1, 1, tzinfo=UTC)) - to_ms(datetime.datetime(2021, 1, 1, tzinfo=UTC)),
        abs=1000.0,
    )
    assert (start + end) / 2 == pytest.approx(to_ms(date), abs=1000.0)
