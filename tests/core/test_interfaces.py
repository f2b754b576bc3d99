"""
Tests for source protocols
"""

from geoextract.core.interfaces import FeatureSource, RasterSource
from geoextract.io.pyramid import PyramidRasterLayer
from geoextract.io.raster import RasterLayer
from geoextract.io.vector import FeatureLayer


def test_raster_sources(tmp_path):
    """Test that single rasters and pyramids share one contract"""
    assert isinstance(RasterLayer(None), RasterSource)
    assert isinstance(PyramidRasterLayer(tmp_path, "tif"), RasterSource)


def test_feature_source():
    """Test that feature layers satisfy FeatureSource"""
    assert isinstance(FeatureLayer(None, None), FeatureSource)
    assert not isinstance(RasterLayer(None), FeatureSource)
