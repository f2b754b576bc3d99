"""
GeoExtract Grid Module

Tile grid addressing for raster pyramids.
"""

from geoextract.grid.base import PyramidGrid
from geoextract.grid.tile_grid import WebMercatorGrid

__all__ = [
    "PyramidGrid",
    "WebMercatorGrid",
]
