"""
TileGrid Implementation

Web-Mercator XYZ grid (EPSG:3857) used by raster pyramids.

Tile addressing:
- x grows eastward from -20037508.34 m, y grows southward from +20037508.34 m
- Zoom level z has 2**z tiles along each axis
- Tile files are named ``{base}/{z}/{x}/{y}.{ending}``
"""

import math
from pathlib import Path
from typing import Iterable, Tuple, Union


class WebMercatorGrid:
    """
    Web-Mercator XYZ tile grid

    Examples:
        >>> grid = WebMercatorGrid(tile_size_px=256)
        >>> grid.tile_for_point(0, 0.0, 0.0)
        (0, 0)
        >>> grid.tile_for_point(1, -1.0, 1.0)
        (0, 0)
        >>> round(grid.resolution(0), 3)
        156543.034
        >>> grid.select_zoom(20.0, available=range(0, 19))
        13
    """

    # Equatorial circumference of the WGS84 ellipsoid in meters
    EARTH_CIRCUMFERENCE_M = 40075016.686

    # Half the circumference: offset from the projection origin to the grid edge
    ORIGIN_SHIFT_M = EARTH_CIRCUMFERENCE_M / 2.0

    def __init__(self, tile_size_px: int = 256):
        """
        Initialize tile grid

        Args:
            tile_size_px: Pixel width/height of one tile (default: 256)
        """
        if tile_size_px <= 0:
            raise ValueError(f"tile_size_px must be positive, got {tile_size_px}")
        self.tile_size_px = tile_size_px

    def tile_extent(self, zoom: int) -> float:
        """Side length of one tile at a zoom level in meters"""
        return self.EARTH_CIRCUMFERENCE_M / (2 ** zoom)

    def resolution(self, zoom: int) -> float:
        """Meters per pixel at a zoom level"""
        return self.tile_extent(zoom) / self.tile_size_px

    def select_zoom(self, requested_resolution: float, available: Iterable[int]) -> int:
        """
        Choose the pyramid level for a requested ground resolution

        Picks the lowest available zoom whose native resolution is at least as
        fine as the request (closest-below). If every level is coarser than
        the request, picks the finest available level. The choice never
        becomes more detailed as the request gets coarser.

        Args:
            requested_resolution: World units per output pixel
            available: Zoom levels that exist on disk

        Returns:
            Zoom level

        Raises:
            ValueError: If no levels are available or the resolution is not positive
        """
        if not requested_resolution > 0:
            raise ValueError(f"Resolution must be positive, got {requested_resolution}")
        levels = sorted(set(available))
        if not levels:
            raise ValueError("No pyramid levels available")

        for zoom in levels:
            # Tolerance keeps exact power-of-two requests on their own level
            if self.resolution(zoom) <= requested_resolution * (1 + 1e-9):
                return zoom
        return levels[-1]

    def tile_for_point(self, zoom: int, x: float, y: float) -> Tuple[int, int]:
        """
        Tile containing a Web-Mercator position

        Positions outside the grid are clamped to the border tiles.
        """
        n = 2 ** zoom
        extent = self.tile_extent(zoom)
        tx = math.floor((x + self.ORIGIN_SHIFT_M) / extent)
        ty = math.floor((self.ORIGIN_SHIFT_M - y) / extent)
        return (min(max(tx, 0), n - 1), min(max(ty, 0), n - 1))

    def tile_bounds(self, zoom: int, x: int, y: int) -> Tuple[float, float, float, float]:
        """
        Web-Mercator bounds of a tile

        Returns:
            (minx, miny, maxx, maxy) in meters
        """
        extent = self.tile_extent(zoom)
        minx = -self.ORIGIN_SHIFT_M + x * extent
        maxy = self.ORIGIN_SHIFT_M - y * extent
        return (minx, maxy - extent, minx + extent, maxy)

    def tiles_for_square(
        self, zoom: int, top_left_x: float, top_left_y: float, size: float
    ) -> list[Tuple[int, int]]:
        """
        Tiles intersecting the square [x, x + size] x [y - size, y]

        Returns:
            (x, y) tile coordinates in row-major order; empty if the square
            lies entirely outside the grid
        """
        minx, maxy = top_left_x, top_left_y
        maxx, miny = top_left_x + size, top_left_y - size
        if (
            maxx <= -self.ORIGIN_SHIFT_M
            or minx >= self.ORIGIN_SHIFT_M
            or maxy <= -self.ORIGIN_SHIFT_M
            or miny >= self.ORIGIN_SHIFT_M
        ):
            return []

        x0, y0 = self.tile_for_point(zoom, minx, maxy)
        # Nudge the far edges inward so a square ending on a tile border
        # does not pull in the neighbouring tile
        eps = self.tile_extent(zoom) * 1e-9
        x1, y1 = self.tile_for_point(zoom, maxx - eps, miny + eps)

        return [(tx, ty) for ty in range(y0, y1 + 1) for tx in range(x0, x1 + 1)]

    @staticmethod
    def tile_path(
        base_path: Union[str, Path], zoom: int, x: int, y: int, file_ending: str
    ) -> Path:
        """
        File path of a tile: ``{base}/{zoom}/{x}/{y}.{ending}``

        The ending may be given with or without its leading dot.

        Examples:
            >>> WebMercatorGrid.tile_path("/data/ortho", 12, 2200, 1430, "tif")
            PosixPath('/data/ortho/12/2200/1430.tif')
        """
        ending = file_ending.lstrip(".")
        return Path(base_path) / str(zoom) / str(x) / f"{y}.{ending}"

    @staticmethod
    def parse_tile_path(path: Union[str, Path]) -> Tuple[int, int, int]:
        """
        Parse (zoom, x, y) back from a tile path

        Raises:
            ValueError: If the path does not follow the naming convention
        """
        p = Path(path)
        try:
            return (int(p.parent.parent.name), int(p.parent.name), int(p.stem))
        except ValueError as e:
            raise ValueError(f"Invalid tile path '{path}': {e}")
