"""
GeoExtract Test Configuration

Shared pytest fixtures for all tests.
"""

import pytest

from geoextract.core.config import ExtractionConfig
from geoextract.sample_data import (
    create_sample_pyramid,
    create_sample_raster,
    create_sample_vector,
)


@pytest.fixture
def raster_path(tmp_path):
    """1000x1000 north-up float raster covering [0, 100] x [0, 100]"""
    return create_sample_raster(str(tmp_path / "terrain.tif"))


@pytest.fixture
def south_up_raster_path(tmp_path):
    """1000x1000 raster covering [0, 100] x [0, 100] with its origin at (0, 0)"""
    return create_sample_raster(str(tmp_path / "terrain_south_up.tif"), north_up=False)


@pytest.fixture
def rgb_raster_path(tmp_path):
    """100x100 three-band byte raster covering [0, 10] x [0, 10]"""
    return create_sample_raster(
        str(tmp_path / "rgb.tif"), width=100, height=100, bounds=(0.0, 0.0, 10.0, 10.0),
        count=3, dtype="uint8",
    )


@pytest.fixture
def vector_path(tmp_path):
    """GeoPackage with points, lines and polygons layers"""
    return create_sample_vector(str(tmp_path / "features.gpkg"))


@pytest.fixture
def pyramid_config():
    """Configuration matching the 16 px sample pyramid"""
    return ExtractionConfig(pyramid_tile_size=16)


@pytest.fixture
def pyramid_path(tmp_path):
    """Pyramid with levels 0-2; tile (2, 0, 0) is missing"""
    return create_sample_pyramid(str(tmp_path / "pyramid"), skip=[(2, 0, 0)])
