"""
GeoExtract Source Protocols

Contracts shared by the layer handles, so callers (and the tagged-result
executor) can treat a single raster and a raster pyramid alike.
"""

from typing import Optional, Protocol, Union, runtime_checkable

from geoextract.core.geometry import Feature, GeometryType
from geoextract.core.tile import Interpolation, NoData, RasterTile


@runtime_checkable
class RasterSource(Protocol):
    """
    Anything that can produce an image of a world-space square

    Implemented by RasterLayer (one dataset) and PyramidRasterLayer
    (tile pyramid).
    """

    def is_valid(self) -> bool:
        ...

    def get_image(
        self,
        top_left_x: float,
        top_left_y: float,
        size_meters: float,
        img_size: int,
        interpolation_type: Union[int, str, Interpolation] = Interpolation.NEAREST,
    ) -> Union[RasterTile, NoData]:
        """
        Extract an img_size x img_size image

        Args:
            top_left_x: World x of the square's top-left corner
            top_left_y: World y of the square's top-left corner
            size_meters: Side length in native units
            img_size: Output width and height in pixels
            interpolation_type: Interpolation mode

        Returns:
            RasterTile, or NO_DATA when nothing covers the square
        """
        ...


@runtime_checkable
class FeatureSource(Protocol):
    """Vector queries over a feature layer"""

    def is_valid(self) -> bool:
        ...

    def get_all_features(self) -> list[Feature]:
        ...

    def get_features_near_position(
        self,
        pos_x: float,
        pos_y: float,
        radius: float,
        max_features: Optional[int] = None,
        geometry_type: Optional[GeometryType] = None,
    ) -> list[Feature]:
        ...

    def crop_lines_to_square(
        self,
        top_left_x: float,
        top_left_y: float,
        size_meters: float,
        max_lines: Optional[int] = None,
    ) -> list[Feature]:
        ...
