"""
GeoExtract Query Module

Vector selection, raster extraction and tagged-result execution.
"""

from geoextract.query.executor import (
    query_all_features,
    query_crop_lines,
    query_features_near,
    query_image,
    query_pyramid_image,
)
from geoextract.query.raster import compute_window, extract_tile
from geoextract.query.spatial import FeatureQuery

__all__ = [
    "FeatureQuery",
    "compute_window",
    "extract_tile",
    "query_all_features",
    "query_crop_lines",
    "query_features_near",
    "query_image",
    "query_pyramid_image",
]
