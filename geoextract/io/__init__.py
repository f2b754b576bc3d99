"""
GeoExtract I/O Module

Raster, vector and pyramid layer handles.
"""

from geoextract.io.pyramid import PyramidRasterLayer
from geoextract.io.raster import RasterLayer
from geoextract.io.vector import FeatureLayer

__all__ = ["FeatureLayer", "PyramidRasterLayer", "RasterLayer"]
