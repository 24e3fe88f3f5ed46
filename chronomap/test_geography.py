import pytest

from chronomap.data.geography import Geography, equirectangular
from chronomap.utils.error_handler import DegenerateViewport, GeographyAlreadyLoaded, GeographyNotLoaded


def test_not_loaded_until_projection_set():
    geography = Geography()

    assert not geography.is_loaded
    with pytest.raises(GeographyNotLoaded):
        geography.project(0.0, 0.0)


def test_load_once():
    geography = Geography()
    geography.load(equirectangular(360.0, 180.0))

    assert geography.is_loaded
    assert geography.project(0.0, 0.0) == (180.0, 90.0)
    assert geography.project(-180.0, 90.0) == (0.0, 0.0)
    with pytest.raises(GeographyAlreadyLoaded):
        geography.load(equirectangular(360.0, 180.0))


def test_projection_must_be_callable():
    with pytest.raises(TypeError):
        Geography().load("mercator")


def test_degenerate_map():
    with pytest.raises(DegenerateViewport):
        equirectangular(0.0, 100.0)
