"""
GeoExtract Core Module

Data model, dataset handle, configuration, protocols, results and exceptions.
"""

from geoextract.core.config import ExtractionConfig, get_config, set_config
from geoextract.core.dataset import Dataset, open_dataset
from geoextract.core.exceptions import (
    ConfigurationError,
    GeoExtractError,
    GeometryTypeError,
    InvalidHandleError,
    NoDataError,
)
from geoextract.core.geometry import (
    Feature,
    GeometryType,
    LineGeometry,
    PointGeometry,
    PolygonGeometry,
)
from geoextract.core.interfaces import FeatureSource, RasterSource
from geoextract.core.result import QueryResult, ResultStatus
from geoextract.core.tile import NO_DATA, Interpolation, NoData, RasterTile

__all__ = [
    # Protocols
    "FeatureSource",
    "RasterSource",
    # Classes
    "Dataset",
    "ExtractionConfig",
    "Feature",
    "GeometryType",
    "Interpolation",
    "LineGeometry",
    "NoData",
    "PointGeometry",
    "PolygonGeometry",
    "QueryResult",
    "RasterTile",
    "ResultStatus",
    # Constants
    "NO_DATA",
    # Functions
    "get_config",
    "open_dataset",
    "set_config",
    # Exceptions
    "ConfigurationError",
    "GeoExtractError",
    "GeometryTypeError",
    "InvalidHandleError",
    "NoDataError",
]
