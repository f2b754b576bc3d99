"""
Pyramid Tile Grid Protocol

Multi-resolution tile grid used to address the files of a raster pyramid.
"""

from typing import Protocol, Tuple, runtime_checkable


@runtime_checkable
class PyramidGrid(Protocol):
    """
    Tile grid of a raster pyramid

    Each zoom level splits the same area into ``2**zoom`` x ``2**zoom``
    tiles of ``tile_size_px`` pixels, halving the ground resolution with
    every level.
    """

    tile_size_px: int

    def resolution(self, zoom: int) -> float:
        """
        Native ground resolution of a zoom level

        Args:
            zoom: Zoom level (0 = single tile)

        Returns:
            World units per pixel
        """
        ...

    def tile_bounds(self, zoom: int, x: int, y: int) -> Tuple[float, float, float, float]:
        """
        World bounds of a tile

        Returns:
            Bounding box as (minx, miny, maxx, maxy)
        """
        ...

    def tiles_for_square(
        self, zoom: int, top_left_x: float, top_left_y: float, size: float
    ) -> list[Tuple[int, int]]:
        """
        Tiles of a zoom level intersecting a square

        Returns:
            (x, y) tile coordinates in row-major order
        """
        ...
