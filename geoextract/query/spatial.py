"""
Vector query engine

Spatial selection over a layer's GeoDataFrame:
- Full scans in storage order
- Features near a position (radius + count bound, closest first)
- Line clipping to an axis-aligned square

Features with a missing geometry are never dropped silently: they are part
of full scans, and of radius queries that do not ask for a specific
geometry type (after all geometric matches).
"""

import logging
from typing import Iterable, Optional

import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, box
from shapely.ops import linemerge

from geoextract.core.geometry import (
    Feature,
    GeometryType,
    LineGeometry,
    from_shapely,
    geometry_type_of,
    to_shapely,
)

logger = logging.getLogger(__name__)

LINE_TYPES = ("LineString", "MultiLineString", "LinearRing")


def square_bounds(
    top_left_x: float, top_left_y: float, size: float
) -> tuple[float, float, float, float]:
    """
    Bounds of a square given by its top-left corner (north-up)

    Returns:
        (minx, miny, maxx, maxy) = (x, y - size, x + size, y)
    """
    return (top_left_x, top_left_y - size, top_left_x + size, top_left_y)


def _check_max_count(max_count: Optional[int]) -> None:
    if max_count is not None and max_count < 0:
        raise ValueError(f"max_count must be >= 0 or None, got {max_count}")


def _attribute_records(frame: gpd.GeoDataFrame, positions: list[int]) -> list[dict]:
    """Plain attribute dicts (missing values as None) for rows at positions"""
    attrs = pd.DataFrame(frame.drop(columns=frame.geometry.name)).iloc[positions]
    attrs = attrs.astype(object).where(pd.notna(attrs), None)
    return attrs.to_dict("records")


def _fid(frame: gpd.GeoDataFrame, position: int) -> int:
    value = frame.index[position]
    try:
        return int(value)
    except (TypeError, ValueError):
        return position


def all_features(frame: gpd.GeoDataFrame) -> list[Feature]:
    """
    Every feature of a layer in storage order

    Multi-part geometries yield one Feature per part.
    """
    positions = list(range(len(frame)))
    records = _attribute_records(frame, positions)
    geometries = frame.geometry

    features = []
    for pos, record in zip(positions, records):
        fid = _fid(frame, pos)
        for part in from_shapely(geometries.iloc[pos]):
            features.append(Feature(fid, part, record))
    return features


def features_near_position(
    frame: gpd.GeoDataFrame,
    pos_x: float,
    pos_y: float,
    radius: float,
    max_count: Optional[int] = None,
    geometry_type: Optional[GeometryType] = None,
) -> list[Feature]:
    """
    Features within a radius of a position

    Ordering (and therefore truncation) is by ascending distance from the
    position, ties broken by storage order. Features without geometry come
    after all geometric matches, in storage order, and only when no
    geometry_type filter is given.

    Args:
        frame: Layer data
        pos_x: Query x in layer units
        pos_y: Query y in layer units
        radius: Search radius in layer units
        max_count: Maximum number of features (None = unbounded)
        geometry_type: Restrict results to one geometry type

    Returns:
        List of at most max_count Features

    Examples:
        >>> # points at (0, 0), (5, 0), (100, 0)
        >>> [f.get_point().x for f in features_near_position(frame, 0, 0, 10, 10)]
        [0.0, 5.0]
    """
    _check_max_count(max_count)
    if max_count == 0 or radius < 0:
        return []

    center = Point(pos_x, pos_y)
    search = box(pos_x - radius, pos_y - radius, pos_x + radius, pos_y + radius)
    candidates = sorted(int(i) for i in frame.sindex.query(search))

    # (distance, storage position, part index, geometry)
    matches = []
    geometries = frame.geometry
    for pos in candidates:
        for part_index, part in enumerate(from_shapely(geometries.iloc[pos])):
            if part is None:
                continue
            if geometry_type is not None and geometry_type_of(part) is not geometry_type:
                continue
            distance = to_shapely(part).distance(center)
            if distance <= radius:
                matches.append((distance, pos, part_index, part))

    matches.sort(key=lambda m: (m[0], m[1], m[2]))

    selected = [(pos, part) for _, pos, _, part in matches]
    if geometry_type is None or geometry_type is GeometryType.NONE:
        missing = geometries.isna() | geometries.is_empty
        selected.extend((int(pos), None) for pos in _true_positions(missing))

    if max_count is not None:
        selected = selected[:max_count]

    logger.debug(
        "%d feature(s) within %s of (%s, %s)", len(selected), radius, pos_x, pos_y
    )
    return _build(frame, selected)


def crop_lines_to_square(
    frame: gpd.GeoDataFrame,
    top_left_x: float,
    top_left_y: float,
    size: float,
    max_count: Optional[int] = None,
) -> list[Feature]:
    """
    Clip line features to an axis-aligned square

    The square spans ``[x, x + size] x [y - size, y]``. Every line part that
    survives clipping becomes its own Line Feature carrying the source
    feature's fid and attributes; contacts that degenerate to points are
    dropped. Output follows storage order and is truncated to max_count
    output features.

    Args:
        frame: Layer data
        top_left_x: Square's minimum x
        top_left_y: Square's maximum y
        size: Side length in layer units
        max_count: Maximum number of clipped lines (None = unbounded)

    Returns:
        List of Line Features
    """
    _check_max_count(max_count)
    if max_count == 0 or size <= 0:
        return []

    square = box(*square_bounds(top_left_x, top_left_y, size))
    candidates = sorted(int(i) for i in frame.sindex.query(square, predicate="intersects"))

    selected = []
    geometries = frame.geometry
    for pos in candidates:
        geom = geometries.iloc[pos]
        if geom.geom_type not in LINE_TYPES:
            continue

        clipped = geom.intersection(square)
        if clipped.geom_type == "MultiLineString":
            clipped = linemerge(clipped)

        for part in from_shapely(clipped):
            if isinstance(part, LineGeometry) and len(part) >= 2:
                selected.append((pos, part))

        if max_count is not None and len(selected) >= max_count:
            selected = selected[:max_count]
            break

    logger.debug("Clipped %d line part(s) to square at (%s, %s)", len(selected), top_left_x, top_left_y)
    return _build(frame, selected)


def _true_positions(series: pd.Series) -> Iterable[int]:
    return [pos for pos, flag in enumerate(series.to_numpy()) if flag]


def _build(frame: gpd.GeoDataFrame, selected: list) -> list[Feature]:
    """Features for (storage position, geometry variant) pairs"""
    if not selected:
        return []
    positions = sorted({pos for pos, _ in selected})
    records = dict(zip(positions, _attribute_records(frame, positions)))
    return [Feature(_fid(frame, pos), part, records[pos]) for pos, part in selected]


class FeatureQuery:
    """
    Fluent API for feature queries

    Examples:
        >>> from geoextract.query.spatial import FeatureQuery
        >>>
        >>> # Closest five points within 100 units
        >>> features = (FeatureQuery(layer)
        ...     .near(500.0, 200.0, radius=100.0)
        ...     .of_type(GeometryType.POINT)
        ...     .limit(5)
        ...     .features())
        >>>
        >>> # Roads clipped to a tile
        >>> roads = FeatureQuery(layer).crop_to_square(0.0, 1000.0, 1000.0).features()
    """

    def __init__(self, layer):
        self.layer = layer
        self._near: tuple[float, float, float] | None = None
        self._square: tuple[float, float, float] | None = None
        self._geometry_type: GeometryType | None = None
        self._limit: int | None = None

    def near(self, x: float, y: float, radius: float) -> "FeatureQuery":
        """Restrict to features within radius of (x, y)"""
        self._near = (x, y, radius)
        self._square = None
        return self

    def crop_to_square(self, top_left_x: float, top_left_y: float, size: float) -> "FeatureQuery":
        """Clip line features to a square"""
        self._square = (top_left_x, top_left_y, size)
        self._near = None
        return self

    def of_type(self, geometry_type: GeometryType) -> "FeatureQuery":
        self._geometry_type = geometry_type
        return self

    def limit(self, max_count: int) -> "FeatureQuery":
        self._limit = max_count
        return self

    def features(self) -> list[Feature]:
        """Execute the query"""
        if self._square is not None:
            return self.layer.crop_lines_to_square(*self._square, self._limit)
        if self._near is not None:
            return self.layer.get_features_near_position(
                *self._near, self._limit, geometry_type=self._geometry_type
            )

        features = self.layer.get_all_features()
        if self._geometry_type is not None:
            features = [f for f in features if f.geometry_type is self._geometry_type]
        return features[: self._limit] if self._limit is not None else features
