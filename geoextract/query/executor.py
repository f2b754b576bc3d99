"""
Tagged-result query execution

Runs vector and raster queries and reports the outcome explicitly, so an
invalid handle, a region without raster data and a query that simply found
nothing can be told apart.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from geoextract.core.config import ExtractionConfig
from geoextract.core.geometry import GeometryType
from geoextract.core.interfaces import FeatureSource, RasterSource
from geoextract.core.result import QueryResult, ResultStatus
from geoextract.core.tile import Interpolation

logger = logging.getLogger(__name__)


def _invalid(source) -> QueryResult:
    message = f"Invalid handle: {source!r}"
    logger.debug(message)
    return QueryResult.invalid(message, empty=[])


def query_all_features(layer: FeatureSource) -> QueryResult:
    """
    All features of a layer

    Examples:
        >>> result = query_all_features(layer)
        >>> result.status
        <ResultStatus.OK: 'ok'>
    """
    if not layer.is_valid():
        return _invalid(layer)
    return QueryResult.of_features(layer.get_all_features())


def query_features_near(
    layer: FeatureSource,
    pos_x: float,
    pos_y: float,
    radius: float,
    max_features: Optional[int] = None,
    geometry_type: Optional[GeometryType] = None,
) -> QueryResult:
    """Features within radius of a position, closest first"""
    if not layer.is_valid():
        return _invalid(layer)
    return QueryResult.of_features(
        layer.get_features_near_position(pos_x, pos_y, radius, max_features, geometry_type)
    )


def query_crop_lines(
    layer: FeatureSource,
    top_left_x: float,
    top_left_y: float,
    size_meters: float,
    max_lines: Optional[int] = None,
) -> QueryResult:
    """Line features clipped to a square"""
    if not layer.is_valid():
        return _invalid(layer)
    return QueryResult.of_features(
        layer.crop_lines_to_square(top_left_x, top_left_y, size_meters, max_lines)
    )


def query_image(
    source: RasterSource,
    top_left_x: float,
    top_left_y: float,
    size_meters: float,
    img_size: int,
    interpolation: Union[int, str, Interpolation] = Interpolation.NEAREST,
) -> QueryResult:
    """
    Image of a square from a raster layer or pyramid

    Returns:
        QueryResult with status OK (value: RasterTile), NO_DATA or INVALID
    """
    if not source.is_valid():
        return QueryResult.invalid(f"Invalid handle: {source!r}")

    tile = source.get_image(top_left_x, top_left_y, size_meters, img_size, interpolation)
    if not tile:
        return QueryResult.no_data(
            f"No raster data for square ({top_left_x}, {top_left_y}, {size_meters})"
        )
    return QueryResult(ResultStatus.OK, tile)


def query_pyramid_image(
    base_path: Union[str, Path],
    file_ending: str,
    top_left_x: float,
    top_left_y: float,
    size_meters: float,
    img_size: int,
    interpolation: Union[int, str, Interpolation] = Interpolation.NEAREST,
    config: ExtractionConfig | None = None,
) -> QueryResult:
    """Image of a square from a tile pyramid given by base path and file ending"""
    from geoextract.io.pyramid import PyramidRasterLayer

    pyramid = PyramidRasterLayer(base_path, file_ending, config)
    return query_image(pyramid, top_left_x, top_left_y, size_meters, img_size, interpolation)
