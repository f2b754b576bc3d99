"""
Tests for RasterTile and Interpolation
"""

import pickle

import numpy as np
import pytest
import rasterio
from rasterio.enums import Resampling
from rasterio.transform import from_origin

from geoextract.core.tile import NO_DATA, Interpolation, NoData, RasterTile


def _tile(data, mask=None):
    if mask is None:
        mask = np.ones(data.shape[1:], dtype=bool)
    return RasterTile(
        data=data,
        mask=mask,
        interpolation=Interpolation.NEAREST,
        transform=from_origin(10.0, 20.0, 0.5, 0.5),
        nodata=0,
        crs="EPSG:3857",
    )


class TestInterpolation:
    """Test interpolation mode contract"""

    def test_integer_values(self):
        """Test the integer values of the interpolation modes"""
        assert [m.value for m in Interpolation] == [0, 1, 2, 3, 4]
        assert Interpolation(0) is Interpolation.NEAREST
        assert Interpolation(1) is Interpolation.BILINEAR

    def test_parse(self):
        """Test parsing modes from enums, integers and names"""
        assert Interpolation.parse(2) is Interpolation.CUBIC
        assert Interpolation.parse("lanczos") is Interpolation.LANCZOS
        assert Interpolation.parse("1") is Interpolation.BILINEAR
        assert Interpolation.parse(Interpolation.TRILINEAR) is Interpolation.TRILINEAR

    def test_parse_unknown(self):
        """Test that unknown modes raise ValueError"""
        with pytest.raises(ValueError):
            Interpolation.parse(9)
        with pytest.raises(ValueError):
            Interpolation.parse("sharpest")

    def test_resampling_mapping(self):
        """Test mapping to rasterio resampling"""
        assert Interpolation.NEAREST.resampling is Resampling.nearest
        assert Interpolation.BILINEAR.resampling is Resampling.bilinear
        assert Interpolation.TRILINEAR.resampling is Resampling.bilinear
        assert Interpolation.CUBIC.resampling is Resampling.cubic


class TestNoData:
    """Test the NO_DATA sentinel"""

    def test_singleton_and_falsy(self):
        """Test NO_DATA is a falsy singleton"""
        assert NoData() is NO_DATA
        assert not NO_DATA
        assert repr(NO_DATA) == "NO_DATA"

    def test_pickle_preserves_identity(self):
        """Test NO_DATA survives pickling"""
        assert pickle.loads(pickle.dumps(NO_DATA)) is NO_DATA


class TestRasterTile:
    """Test RasterTile properties"""

    def test_shape_properties(self):
        """Test tile size and georeference properties"""
        tile = _tile(np.zeros((1, 4, 6), dtype=np.float32))
        assert (tile.band_count, tile.height, tile.width) == (1, 4, 6)
        assert tile.top_left == (10.0, 20.0)
        assert tile.pixel_size == (0.5, 0.5)

    def test_rejects_bad_shapes(self):
        """Test validation of data and mask shapes"""
        with pytest.raises(ValueError):
            _tile(np.zeros((4, 4), dtype=np.float32))
        with pytest.raises(ValueError):
            _tile(np.zeros((1, 4, 4)), mask=np.ones((2, 2), dtype=bool))

    def test_image_format(self):
        """Test pixel format names"""
        assert _tile(np.zeros((1, 2, 2), dtype=np.float32)).image_format == "RF"
        assert _tile(np.zeros((1, 2, 2), dtype=np.uint8)).image_format == "L8"
        assert _tile(np.zeros((3, 2, 2), dtype=np.uint8)).image_format == "RGB8"
        assert _tile(np.zeros((4, 2, 2), dtype=np.uint8)).image_format == "RGBA8"
        assert _tile(np.zeros((2, 2, 2), dtype=np.int16)).image_format == "RAW"

    def test_get_band(self):
        """Test 1-based band access"""
        data = np.arange(8, dtype=np.uint8).reshape(2, 2, 2)
        tile = _tile(data)
        np.testing.assert_array_equal(tile.get_band(2), data[1])
        with pytest.raises(IndexError):
            tile.get_band(0)

    def test_histogram_ignores_masked_pixels(self):
        """Test histogram over valid pixels only"""
        data = np.array([[[1, 1], [2, 9]]], dtype=np.uint8)
        mask = np.array([[True, True], [True, False]])
        tile = _tile(data, mask)
        assert tile.histogram() == {1: 2, 2: 1}
        assert tile.valid_fraction() == 0.75

    def test_most_common(self):
        """Test most frequent values"""
        data = np.array([[[3, 3, 3], [1, 1, 2]]], dtype=np.uint8)
        tile = _tile(data)
        assert tile.most_common(2) == [3, 1]
        assert tile.most_common(10) == [3, 1, 2]

    def test_to_geotiff(self, tmp_path):
        """Test writing a tile to GeoTIFF"""
        data = np.arange(12, dtype=np.uint8).reshape(1, 3, 4)
        tile = _tile(data)
        path = str(tmp_path / "tile.tif")
        tile.to_geotiff(path)

        with rasterio.open(path) as src:
            assert src.width == 4
            assert src.height == 3
            assert src.transform == tile.transform
            np.testing.assert_array_equal(src.read(), data)
