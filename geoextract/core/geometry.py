"""
Feature Model

Typed vector features. A Feature holds exactly one geometry variant
(none, point, line or polygon) fixed at construction, plus a read-only
attribute mapping. Features are plain values: they never reference the
layer they were read from.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from shapely.geometry import LinearRing, LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry

from geoextract.core.exceptions import GeometryTypeError

Coordinate = Tuple[float, ...]


class GeometryType(IntEnum):
    """Geometry variant tag"""

    NONE = 0
    POINT = 1
    LINE = 2
    POLYGON = 3


@dataclass(frozen=True)
class PointGeometry:
    x: float
    y: float
    z: Optional[float] = None

    @property
    def coords(self) -> Coordinate:
        return (self.x, self.y) if self.z is None else (self.x, self.y, self.z)


@dataclass(frozen=True)
class LineGeometry:
    vertices: Tuple[Coordinate, ...]

    def __len__(self) -> int:
        return len(self.vertices)

    def length(self) -> float:
        """2D length of the vertex sequence"""
        return sum(
            math.hypot(b[0] - a[0], b[1] - a[1])
            for a, b in zip(self.vertices, self.vertices[1:])
        )


@dataclass(frozen=True)
class PolygonGeometry:
    """
    Polygon with one exterior ring and any number of holes

    Rings are closed vertex sequences (first vertex repeated at the end).
    """

    exterior: Tuple[Coordinate, ...]
    holes: Tuple[Tuple[Coordinate, ...], ...] = ()

    def area(self) -> float:
        """Planar area (exterior minus holes)"""
        return abs(_ring_area(self.exterior)) - sum(abs(_ring_area(h)) for h in self.holes)


Geometry = Union[None, PointGeometry, LineGeometry, PolygonGeometry]


def _ring_area(ring: Tuple[Coordinate, ...]) -> float:
    # Shoelace formula
    total = 0.0
    for a, b in zip(ring, ring[1:]):
        total += a[0] * b[1] - b[0] * a[1]
    return total / 2.0


def _coords(seq) -> Tuple[Coordinate, ...]:
    return tuple(tuple(float(v) for v in c) for c in seq)


def geometry_type_of(geometry: Geometry) -> GeometryType:
    """Return the tag for a geometry variant"""
    if geometry is None:
        return GeometryType.NONE
    if isinstance(geometry, PointGeometry):
        return GeometryType.POINT
    if isinstance(geometry, LineGeometry):
        return GeometryType.LINE
    if isinstance(geometry, PolygonGeometry):
        return GeometryType.POLYGON
    raise GeometryTypeError(f"Not a geometry variant: {type(geometry).__name__}")


def from_shapely(geom: Optional[BaseGeometry]) -> Iterator[Geometry]:
    """
    Convert a shapely geometry into geometry variants

    Multi-part geometries and collections yield one variant per part.
    Missing or empty geometries yield a single ``None``.

    Examples:
        >>> from shapely.geometry import MultiPoint
        >>> list(from_shapely(MultiPoint([(0, 0), (1, 1)])))
        [PointGeometry(x=0.0, y=0.0, z=None), PointGeometry(x=1.0, y=1.0, z=None)]
    """
    if geom is None or geom.is_empty:
        yield None
        return

    if isinstance(geom, BaseMultipartGeometry):
        for part in geom.geoms:
            if not part.is_empty:
                yield from from_shapely(part)
        return

    if isinstance(geom, Point):
        yield PointGeometry(float(geom.x), float(geom.y), float(geom.z) if geom.has_z else None)
    elif isinstance(geom, (LineString, LinearRing)):
        yield LineGeometry(_coords(geom.coords))
    elif isinstance(geom, Polygon):
        yield PolygonGeometry(
            _coords(geom.exterior.coords),
            tuple(_coords(ring.coords) for ring in geom.interiors),
        )
    else:
        raise GeometryTypeError(f"Unsupported geometry: {geom.geom_type}")


def to_shapely(geometry: Geometry) -> Optional[BaseGeometry]:
    """Convert a geometry variant back into a shapely geometry"""
    kind = geometry_type_of(geometry)
    if kind is GeometryType.NONE:
        return None
    if kind is GeometryType.POINT:
        return Point(geometry.coords)
    if kind is GeometryType.LINE:
        return LineString(geometry.vertices)
    return Polygon(geometry.exterior, list(geometry.holes))


def _plain_value(value: Any) -> Any:
    """Convert numpy/pandas scalars to plain Python values"""
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            value = value.item()
        except (ValueError, TypeError):
            return value
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


@dataclass(frozen=True)
class Feature:
    """
    One vector record: a geometry variant plus attributes

    Attributes:
        fid: Feature id in the source layer (shared by parts of a multi-geometry)
        geometry: None, PointGeometry, LineGeometry or PolygonGeometry
        attributes: Read-only attribute mapping

    Examples:
        >>> f = Feature(1, PointGeometry(5.0, 0.0), {"name": "well"})
        >>> f.geometry_type
        <GeometryType.POINT: 1>
        >>> f.get_point().x
        5.0
        >>> f.get_line()
        Traceback (most recent call last):
        ...
        geoextract.core.exceptions.GeometryTypeError: ...
    """

    fid: int
    geometry: Geometry
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        geometry_type_of(self.geometry)
        copied = {str(k): _plain_value(v) for k, v in dict(self.attributes).items()}
        object.__setattr__(self, "attributes", MappingProxyType(copied))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return (
            self.fid == other.fid
            and self.geometry == other.geometry
            and dict(self.attributes) == dict(other.attributes)
        )

    def __hash__(self) -> int:
        return hash((self.fid, self.geometry))

    @property
    def geometry_type(self) -> GeometryType:
        return geometry_type_of(self.geometry)

    def get_point(self) -> PointGeometry:
        return self._expect(GeometryType.POINT)

    def get_line(self) -> LineGeometry:
        return self._expect(GeometryType.LINE)

    def get_polygon(self) -> PolygonGeometry:
        return self._expect(GeometryType.POLYGON)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def get_attributes(self) -> dict[str, Any]:
        return dict(self.attributes)

    def to_shapely(self) -> Optional[BaseGeometry]:
        return to_shapely(self.geometry)

    def to_geojson(self) -> dict[str, Any]:
        """GeoJSON Feature dict"""
        geom = self.to_shapely()
        return {
            "type": "Feature",
            "id": self.fid,
            "geometry": geom.__geo_interface__ if geom is not None else None,
            "properties": self.get_attributes(),
        }

    def _expect(self, kind: GeometryType):
        if self.geometry_type is not kind:
            raise GeometryTypeError(
                f"Feature {self.fid} has {self.geometry_type.name} geometry, not {kind.name}"
            )
        return self.geometry
