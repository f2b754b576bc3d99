"""
GeoExtract - Raster and vector extraction for spatially bounded queries

Opens geospatial datasets once and answers "image of this square of
terrain" and "features near this point" queries against them.

Quick Start:
    >>> import geoextract as gx
    >>>
    >>> # Raster tile from a single dataset
    >>> dem = gx.RasterLayer.open("dem.tif")
    >>> tile = dem.get_image(500000.0, 5200000.0, 1000.0, 256, gx.Interpolation.BILINEAR)
    >>>
    >>> # Raster tile from a pre-built pyramid ({base}/{z}/{x}/{y}.tif)
    >>> ortho = gx.PyramidRasterLayer("/data/ortho", "tif")
    >>> tile = ortho.get_image(1820000.0, 6140000.0, 2000.0, 256, gx.Interpolation.NEAREST)
    >>>
    >>> # Vector features
    >>> with gx.open_dataset("city.gpkg") as ds:
    ...     roads = ds.get_feature_layer("roads")
    ...     near = roads.get_features_near_position(1000.0, 2000.0, 50.0, 10)
"""

from geoextract.core import (
    NO_DATA,
    ConfigurationError,
    Dataset,
    ExtractionConfig,
    Feature,
    FeatureSource,
    GeoExtractError,
    GeometryType,
    GeometryTypeError,
    Interpolation,
    InvalidHandleError,
    LineGeometry,
    NoData,
    NoDataError,
    PointGeometry,
    PolygonGeometry,
    QueryResult,
    RasterSource,
    RasterTile,
    ResultStatus,
    get_config,
    open_dataset,
    set_config,
)
from geoextract.grid import WebMercatorGrid
from geoextract.io import FeatureLayer, PyramidRasterLayer, RasterLayer
from geoextract.query import (
    FeatureQuery,
    query_all_features,
    query_crop_lines,
    query_features_near,
    query_image,
    query_pyramid_image,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "Dataset",
    "ExtractionConfig",
    "Feature",
    "FeatureLayer",
    "FeatureQuery",
    "FeatureSource",
    "GeoExtractError",
    "GeometryType",
    "GeometryTypeError",
    "Interpolation",
    "InvalidHandleError",
    "LineGeometry",
    "NO_DATA",
    "NoData",
    "NoDataError",
    "PointGeometry",
    "PolygonGeometry",
    "PyramidRasterLayer",
    "QueryResult",
    "RasterLayer",
    "RasterSource",
    "RasterTile",
    "ResultStatus",
    "WebMercatorGrid",
    "__version__",
    "get_config",
    "open_dataset",
    "query_all_features",
    "query_crop_lines",
    "query_features_near",
    "query_image",
    "query_pyramid_image",
    "set_config",
]
