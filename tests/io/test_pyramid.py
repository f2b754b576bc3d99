"""
Tests for PyramidRasterLayer
"""

from unittest.mock import patch

import numpy as np
import pytest

from geoextract.core.dataset import Dataset
from geoextract.core.tile import NO_DATA, RasterTile
from geoextract.grid.tile_grid import WebMercatorGrid
from geoextract.io.pyramid import PyramidRasterLayer

ORIGIN = WebMercatorGrid.ORIGIN_SHIFT_M
WORLD = WebMercatorGrid.EARTH_CIRCUMFERENCE_M


@pytest.fixture
def pyramid(pyramid_path, pyramid_config):
    return PyramidRasterLayer(pyramid_path, ".tif", pyramid_config)


class TestPyramidLevels:
    """Test level discovery and selection"""

    def test_available_levels(self, pyramid):
        """Test level discovery"""
        assert pyramid.available_levels() == [0, 1, 2]
        assert pyramid.is_valid()
        assert pyramid.file_ending == "tif"

    def test_missing_base_is_invalid(self, tmp_path, pyramid_config):
        """Test a pyramid without levels"""
        layer = PyramidRasterLayer(tmp_path / "nothing", "tif", pyramid_config)
        assert not layer.is_valid()
        assert layer.select_level(1000.0, 256) is None
        assert layer.get_image(0.0, 0.0, 1000.0, 16) is NO_DATA

    def test_select_level(self, pyramid):
        """Test level selection by requested resolution"""
        assert pyramid.select_level(WORLD, 16) == 0
        assert pyramid.select_level(WORLD, 32) == 1
        assert pyramid.select_level(WORLD, 64) == 2
        # Finer than any level
        assert pyramid.select_level(1000.0, 256) == 2
        # Coarser than every level
        assert pyramid.select_level(WORLD, 1) == 0

    def test_tile_path(self, pyramid, pyramid_path):
        """Test tile file naming"""
        assert str(pyramid.tile_path(2, 1, 3)).endswith("2/1/3.tif")
        assert pyramid.tile_path(2, 1, 3).is_file()


class TestPyramidImage:
    """Test mosaicking across tiles"""

    def test_whole_world_level0(self, pyramid):
        """Test a whole-world request served from level 0"""
        tile = pyramid.get_image(-ORIGIN, ORIGIN, WORLD, 16)
        assert isinstance(tile, RasterTile)
        assert tile.data.shape == (1, 16, 16)
        assert np.all(tile.data == 1)

    def test_mosaic_with_missing_tile(self, pyramid):
        """Test mosaicking around a missing tile"""
        tile = pyramid.get_image(-ORIGIN, ORIGIN, WORLD, 64)
        assert tile.data.shape == (1, 64, 64)
        # Tile (2, 0, 0) covers the top-left 16x16 output pixels
        assert not tile.mask[:16, :16].any()
        assert tile.mask[16:, :].all()
        assert tile.mask[:, 16:].all()
        assert np.all(tile.data[0][tile.mask] == 3)

    def test_only_missing_tile_is_no_data(self, pyramid):
        """Test a request covered only by a missing tile"""
        extent = WORLD / 4
        assert pyramid.get_image(-ORIGIN, ORIGIN, extent, 16) is NO_DATA

    def test_zoomed_in_uses_finest_level(self, pyramid):
        """Test requests finer than every level"""
        tile = pyramid.get_image(-5000.0, 5000.0, 1000.0, 256)
        assert tile.data.shape == (1, 256, 256)
        assert np.all(tile.data == 3)

    def test_outside_grid(self, pyramid):
        """Test a request outside the grid"""
        assert pyramid.get_image(3 * ORIGIN, 3 * ORIGIN, 1000.0, 16) is NO_DATA

    def test_invalid_arguments(self, pyramid):
        """Test that non-positive sizes raise"""
        with pytest.raises(ValueError):
            pyramid.get_image(0.0, 0.0, 0.0, 16)
        with pytest.raises(ValueError):
            pyramid.get_image(0.0, 0.0, 1000.0, 0)

    def test_tile_handles_closed_once(self, pyramid):
        """Test that every opened tile is closed"""
        closed = []
        real_close = Dataset.close

        def tracking_close(self):
            closed.append(self)
            real_close(self)

        with patch.object(Dataset, "close", tracking_close):
            pyramid.get_image(-ORIGIN, ORIGIN, WORLD, 32)

        assert len(closed) == 4
        assert all(ds.closed for ds in closed)

    def test_tiles_opened_raster_only(self, pyramid):
        """Test that tile opens skip vector layer listing"""
        with patch("geoextract.core.dataset.gpd.list_layers") as list_layers:
            tile = pyramid.get_image(-ORIGIN, ORIGIN, WORLD, 32)
        assert isinstance(tile, RasterTile)
        list_layers.assert_not_called()
