"""
Pyramid-backed raster layer

A logical raster made of pre-built Web-Mercator tiles at several zoom
levels, stored as ``{base}/{zoom}/{x}/{y}.{ending}``. Each request picks
one level by resolution, opens the tiles of that level covering the
requested square, and mosaics their extracts onto one output grid.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from geoextract.core.config import ExtractionConfig, get_config
from geoextract.core.dataset import Dataset
from geoextract.core.tile import NO_DATA, Interpolation, NoData, RasterTile
from geoextract.grid.tile_grid import WebMercatorGrid
from geoextract.query.raster import extract_tile

logger = logging.getLogger(__name__)


class PyramidRasterLayer:
    """
    Raster layer resolved per request from a tile pyramid

    Tile files are opened with fresh handles for each request and closed
    before it returns, so one PyramidRasterLayer holds no open files.

    Attributes:
        base_path: Pyramid root directory
        file_ending: Tile file extension (with or without leading dot)
        grid: Tile grid addressing the pyramid

    Examples:
        >>> ortho = PyramidRasterLayer("/data/ortho", "tif")
        >>> ortho.available_levels()
        [10, 11, 12, 13, 14]
        >>> tile = ortho.get_image(1820000.0, 6140000.0, 2000.0, 256, Interpolation.BILINEAR)
    """

    def __init__(
        self,
        base_path: Union[str, Path],
        file_ending: str,
        config: ExtractionConfig | None = None,
    ):
        self.base_path = Path(base_path)
        self.file_ending = file_ending.lstrip(".")
        self.config = config or get_config()
        self.grid = WebMercatorGrid(self.config.pyramid_tile_size)

    def available_levels(self) -> list[int]:
        """Zoom levels present as integer-named directories under base_path"""
        if not self.base_path.is_dir():
            return []
        return sorted(
            int(p.name) for p in self.base_path.iterdir() if p.is_dir() and p.name.isdigit()
        )

    def is_valid(self) -> bool:
        return bool(self.available_levels())

    def select_level(self, size_meters: float, img_size: int) -> int | None:
        """Zoom level used for a request, or None if the pyramid is empty"""
        levels = self.available_levels()
        if not levels:
            return None
        return self.grid.select_zoom(size_meters / img_size, levels)

    def tile_path(self, zoom: int, x: int, y: int) -> Path:
        return self.grid.tile_path(self.base_path, zoom, x, y, self.file_ending)

    def get_image(
        self,
        top_left_x: float,
        top_left_y: float,
        size_meters: float,
        img_size: int,
        interpolation_type: Union[int, str, Interpolation] = Interpolation.NEAREST,
    ) -> Union[RasterTile, NoData]:
        """
        Extract an img_size x img_size image from the best-matching pyramid level

        Returns:
            RasterTile, or NO_DATA if no tile file exists for the request or
            none of them has data there

        Raises:
            ValueError: If sizes are not positive or the mode is unknown
        """
        if img_size <= 0:
            raise ValueError(f"img_size must be positive, got {img_size}")
        if not size_meters > 0:
            raise ValueError(f"size_meters must be positive, got {size_meters}")
        interpolation = Interpolation.parse(interpolation_type)

        zoom = self.select_level(size_meters, img_size)
        if zoom is None:
            logger.debug("Pyramid %s has no levels", self.base_path)
            return NO_DATA

        tiles = self.grid.tiles_for_square(zoom, top_left_x, top_left_y, size_meters)
        logger.debug(
            "Pyramid %s: level %d, %d candidate tile(s)", self.base_path, zoom, len(tiles)
        )

        result: RasterTile | None = None
        for x, y in tiles:
            path = self.tile_path(zoom, x, y)
            if not path.is_file():
                continue

            with Dataset(path, self.config, vector=False) as dataset:
                tile = extract_tile(
                    dataset.get_raster_layer(""),
                    top_left_x,
                    top_left_y,
                    size_meters,
                    img_size,
                    interpolation,
                )
            if not tile:
                continue

            if result is None:
                result = tile
            elif tile.band_count != result.band_count or tile.dtype != result.dtype:
                logger.warning("Skipping pyramid tile %s: band layout differs", path)
            else:
                _merge_into(result, tile)

            if result.mask.all():
                break

        if result is None:
            logger.debug("No pyramid data for square at (%s, %s)", top_left_x, top_left_y)
            return NO_DATA
        return result

    def __repr__(self) -> str:
        return f"<PyramidRasterLayer: {self.base_path}/{{z}}/{{x}}/{{y}}.{self.file_ending}>"


def _merge_into(target: RasterTile, source: RasterTile) -> None:
    """Copy source pixels into target where target has no data yet"""
    fill = ~target.mask & source.mask
    if not fill.any():
        return
    target.data[:, fill] = source.data[:, fill]
    target.mask |= fill
