"""
Shared pytest fixtures for the timeline engine tests.
"""

import datetime

import pytest
from PyQt5.QtCore import QCoreApplication

from chronomap.data.event_model import Domain, Event
from chronomap.rendering.time_scale import TimeScale
from chronomap.utils.civil_time import from_civil

UTC = datetime.timezone.utc


@pytest.fixture(scope='session')
def qapp():
    """Core application so QTimer-based debouncing can run."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def domain():
    """Year 1 to a fixed 'now' so tests do not depend on the clock."""
    return Domain.default(now=from_civil(2026, 10, 19))


@pytest.fixture
def base_scale(domain):
    return TimeScale(domain, (0.0, 1000.0))


def _make_event(year, month, day, title='', lat=0.0, lng=0.0, hour=0):
    return Event(datetime.datetime(year, month, day, hour, tzinfo=UTC), title, lat, lng)


@pytest.fixture
def january_events():
    """One event every five days through January 2021."""
    return [_make_event(2021, 1, 1 + 5 * i, f"E{i}") for i in range(7)]
