"""
Raster extraction engine

Maps a world-space square onto a source raster's pixel grid, reads the
overlapping part resampled to the requested image size, and pads the rest
with the nodata value.

Window convention:
    The square's top-left corner is mapped through the inverse affine
    transform; the square then extends ``size / |a|`` columns and
    ``size / |e|`` rows towards increasing pixel indices. For the usual
    north-up raster this is ``[x, x + size] x [y - size, y]``.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

import numpy as np
from numpy.typing import NDArray
from rasterio.transform import Affine
from rasterio.windows import Window

from geoextract.core.exceptions import ConfigurationError
from geoextract.core.tile import NO_DATA, Interpolation, NoData, RasterTile

if TYPE_CHECKING:
    from geoextract.io.raster import RasterLayer

logger = logging.getLogger(__name__)


def compute_window(
    transform: Affine,
    top_left_x: float,
    top_left_y: float,
    size_x: float,
    size_y: Optional[float] = None,
) -> Window:
    """
    World-space square (or rectangle) to fractional pixel window

    Args:
        transform: Raster affine transform (non-rotated)
        top_left_x: World x of the corner at the pixel-origin side
        top_left_y: World y of the corner at the pixel-origin side
        size_x: Extent along x in world units
        size_y: Extent along y in world units (default: size_x)

    Returns:
        Window with fractional offsets and lengths

    Examples:
        >>> from rasterio.transform import from_origin
        >>> t = from_origin(0.0, 100.0, 0.1, 0.1)
        >>> compute_window(t, 0.0, 100.0, 50.0)
        Window(col_off=0.0, row_off=0.0, width=500.0, height=500.0)
    """
    if size_y is None:
        size_y = size_x
    col, row = ~transform @ (top_left_x, top_left_y)
    return Window(col, row, size_x / abs(transform.a), size_y / abs(transform.e))


def window_transform(transform: Affine, window: Window, img_width: int, img_height: int) -> Affine:
    """Affine transform of an output grid of img_width x img_height pixels spanning window"""
    return (
        transform
        @ Affine.translation(window.col_off, window.row_off)
        @ Affine.scale(window.width / img_width, window.height / img_height)
    )


@dataclass(frozen=True)
class WindowPlacement:
    """
    Where the readable part of a window lands in the output image

    ``source`` is the window clamped to the raster extent (fractional
    offsets are passed through to GDAL). It is read at ``read_shape``
    (rows, cols) and pasted with its pixel (0, 0) at output position
    (dst_row, dst_col).
    """

    source: Window
    read_shape: tuple[int, int]
    dst_row: int
    dst_col: int


def place_window(
    window: Window, raster_width: int, raster_height: int, img_width: int, img_height: int
) -> Optional[WindowPlacement]:
    """
    Clamp a window to the raster extent and map it onto the output grid

    Returns:
        WindowPlacement, or None if no output pixel would receive data
    """
    col0 = max(window.col_off, 0.0)
    col1 = min(window.col_off + window.width, float(raster_width))
    row0 = max(window.row_off, 0.0)
    row1 = min(window.row_off + window.height, float(raster_height))
    if col1 <= col0 or row1 <= row0:
        return None

    sx = img_width / window.width
    sy = img_height / window.height

    dst_col = round((col0 - window.col_off) * sx)
    dst_row = round((row0 - window.row_off) * sy)
    if dst_col >= img_width or dst_row >= img_height:
        return None
    read_cols = max(1, round((col1 - window.col_off) * sx) - dst_col)
    read_rows = max(1, round((row1 - window.row_off) * sy) - dst_row)

    return WindowPlacement(
        source=Window(col0, row0, col1 - col0, row1 - row0),
        read_shape=(read_rows, read_cols),
        dst_row=dst_row,
        dst_col=dst_col,
    )


def _fits_dtype(value, dtype: np.dtype) -> bool:
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        if not math.isfinite(value) or not float(value).is_integer():
            return False
        info = np.iinfo(dtype)
        return info.min <= value <= info.max
    if np.issubdtype(dtype, np.floating):
        return not math.isfinite(value) or abs(value) <= np.finfo(dtype).max
    return True


def _fill_value(nodata, fallback, dtype: np.dtype):
    """
    Value written into pixels outside the source extent

    The raster's own nodata wins; otherwise the configured fallback, which
    must be representable in the raster's dtype.

    Raises:
        ConfigurationError: If the configured fallback does not fit the dtype
    """
    if nodata is not None:
        if np.issubdtype(dtype, np.integer) and math.isnan(nodata):
            return 0
        return nodata
    if not _fits_dtype(fallback, dtype):
        raise ConfigurationError(
            f"nodata_value {fallback!r} cannot be stored in a {np.dtype(dtype).name} raster"
        )
    return np.asarray(fallback, dtype=dtype).item()


def _valid_mask(data: NDArray, nodata) -> NDArray:
    if nodata is None:
        return np.ones(data.shape[1:], dtype=bool)
    if isinstance(nodata, float) and math.isnan(nodata):
        return ~np.all(np.isnan(data), axis=0)
    return ~np.all(data == nodata, axis=0)


def extract_tile(
    layer: "RasterLayer",
    top_left_x: float,
    top_left_y: float,
    size_meters: float,
    img_size_px: int,
    interpolation: Union[int, str, Interpolation] = Interpolation.NEAREST,
) -> Union[RasterTile, NoData]:
    """
    Extract a resampled square image from a raster layer

    Args:
        layer: Source raster layer
        top_left_x: World x of the square's top-left corner
        top_left_y: World y of the square's top-left corner
        size_meters: Side length in the raster's native units
        img_size_px: Output width and height in pixels
        interpolation: Interpolation mode (enum, integer or name)

    Returns:
        RasterTile of exactly img_size_px x img_size_px pixels, or NO_DATA
        when the layer is invalid or the square misses the raster

    Raises:
        ValueError: If sizes are not positive or the mode is unknown
        ConfigurationError: If the configured nodata_value does not fit the raster dtype
    """
    if img_size_px <= 0:
        raise ValueError(f"img_size_px must be positive, got {img_size_px}")
    if not size_meters > 0:
        raise ValueError(f"size_meters must be positive, got {size_meters}")
    interpolation = Interpolation.parse(interpolation)

    with layer.lock:
        if not layer.is_valid():
            logger.debug("Raster layer %r is invalid, no image", layer.name)
            return NO_DATA

        transform = layer.transform
        window = compute_window(transform, top_left_x, top_left_y, size_meters)
        placement = place_window(window, layer.width, layer.height, img_size_px, img_size_px)
        if placement is None:
            logger.debug(
                "Square (%s, %s, %s) lies outside raster %s", top_left_x, top_left_y,
                size_meters, layer.name or layer.path,
            )
            return NO_DATA

        logger.debug("Reading %s into %s for %s", placement.source, placement.read_shape, window)
        data = layer.read_window(placement.source, placement.read_shape, interpolation.resampling)
        nodata = layer.nodata

    fill = _fill_value(nodata, layer.config.nodata_value, data.dtype)
    out = np.full((data.shape[0], img_size_px, img_size_px), fill, dtype=data.dtype)
    mask = np.zeros((img_size_px, img_size_px), dtype=bool)

    src_r0 = max(0, -placement.dst_row)
    src_c0 = max(0, -placement.dst_col)
    dst_r0 = placement.dst_row + src_r0
    dst_c0 = placement.dst_col + src_c0
    rows = min(data.shape[1] - src_r0, img_size_px - dst_r0)
    cols = min(data.shape[2] - src_c0, img_size_px - dst_c0)

    block = data[:, src_r0 : src_r0 + rows, src_c0 : src_c0 + cols]
    out[:, dst_r0 : dst_r0 + rows, dst_c0 : dst_c0 + cols] = block
    mask[dst_r0 : dst_r0 + rows, dst_c0 : dst_c0 + cols] = _valid_mask(block, nodata)

    if not mask.any():
        return NO_DATA

    return RasterTile(
        data=out,
        mask=mask,
        interpolation=interpolation,
        transform=window_transform(transform, window, img_size_px, img_size_px),
        nodata=fill,
        crs=layer.crs,
    )
