"""
Raster Tile Model

An extracted, resampled image covering a square of terrain, together with
the georeference of its output pixel grid.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

import numpy as np
from rasterio.transform import Affine
from numpy.typing import NDArray
from rasterio.enums import Resampling


class Interpolation(IntEnum):
    """
    Resampling mode used when extracting an image

    The integer values are part of the external contract and follow the host
    engine's image interpolation numbering.
    """

    NEAREST = 0
    BILINEAR = 1
    CUBIC = 2
    TRILINEAR = 3
    LANCZOS = 4

    @classmethod
    def parse(cls, value: "int | str | Interpolation") -> "Interpolation":
        """
        Accept an Interpolation, its integer value or its name

        Raises:
            ValueError: For unknown values
        """
        if isinstance(value, str) and not value.isdigit():
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown interpolation mode: {value!r}") from None
        return cls(int(value))

    @property
    def resampling(self) -> Resampling:
        # Trilinear blends mipmap levels at render time; the source is sampled bilinearly
        return _RESAMPLING[self]


_RESAMPLING = {
    Interpolation.NEAREST: Resampling.nearest,
    Interpolation.BILINEAR: Resampling.bilinear,
    Interpolation.CUBIC: Resampling.cubic,
    Interpolation.TRILINEAR: Resampling.bilinear,
    Interpolation.LANCZOS: Resampling.lanczos,
}


class NoData:
    """Sentinel returned when no raster data exists for a requested region"""

    _instance: Optional["NoData"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_DATA"

    def __reduce__(self):
        return (NoData, ())


NO_DATA = NoData()


@dataclass
class RasterTile:
    """
    Extracted raster image

    Attributes:
        data: Pixel buffer shaped (bands, height, width)
        mask: Boolean (height, width) array, True where source data was read
        interpolation: Interpolation applied while resampling
        transform: Affine transform of the output pixel grid
        nodata: Value written into pixels outside the source extent
        crs: Coordinate reference system of the source (may be None)

    Examples:
        >>> tile = layer.get_image(0.0, 100.0, 50.0, 256, Interpolation.BILINEAR)
        >>> tile.width, tile.height
        (256, 256)
        >>> tile.top_left
        (0.0, 100.0)
        >>> tile.image_format
        'RF'
    """

    data: NDArray
    mask: NDArray
    interpolation: Interpolation
    transform: Affine
    nodata: Any = None
    crs: Any = None

    def __post_init__(self):
        if self.data.ndim != 3:
            raise ValueError(f"Tile data must be (bands, height, width), got {self.data.shape}")
        if self.mask.shape != self.data.shape[1:]:
            raise ValueError(f"Mask shape {self.mask.shape} does not match data {self.data.shape}")

    @property
    def band_count(self) -> int:
        return self.data.shape[0]

    @property
    def height(self) -> int:
        return self.data.shape[1]

    @property
    def width(self) -> int:
        return self.data.shape[2]

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def top_left(self) -> tuple[float, float]:
        return (self.transform.c, self.transform.f)

    @property
    def pixel_size(self) -> tuple[float, float]:
        """World units per output pixel (x, y)"""
        return (abs(self.transform.a), abs(self.transform.e))

    @property
    def image_format(self) -> str:
        """
        Pixel format name for image consumers

        RF for single float bands, L8 for single byte bands, RGB8/RGBA8 for
        three/four byte bands, RAW for anything else.
        """
        if self.band_count == 1 and np.issubdtype(self.dtype, np.floating):
            return "RF"
        if self.dtype == np.uint8:
            return {1: "L8", 3: "RGB8", 4: "RGBA8"}.get(self.band_count, "RAW")
        return "RAW"

    def get_band(self, index: int) -> NDArray:
        """Band as (height, width) array (1-based index, GDAL convention)"""
        if not 1 <= index <= self.band_count:
            raise IndexError(f"Band {index} out of range 1..{self.band_count}")
        return self.data[index - 1]

    def valid_fraction(self) -> float:
        return float(self.mask.mean()) if self.mask.size else 0.0

    def histogram(self, band: int = 1) -> dict[Any, int]:
        """
        Count of each distinct value among valid pixels of a band

        Intended for categorical rasters (land cover classes etc.).
        """
        values = self.get_band(band)[self.mask]
        uniques, counts = np.unique(values, return_counts=True)
        return {u.item(): int(c) for u, c in zip(uniques, counts)}

    def most_common(self, n: int, band: int = 1) -> list[Any]:
        """The n most frequent values among valid pixels, most frequent first"""
        hist = self.histogram(band)
        ranked = sorted(hist.items(), key=lambda item: (-item[1], item[0]))
        return [value for value, _ in ranked[:n]]

    def to_geotiff(self, path: str) -> None:
        """Write the tile to a GeoTIFF"""
        import rasterio

        profile = {
            "driver": "GTiff",
            "dtype": str(self.dtype),
            "width": self.width,
            "height": self.height,
            "count": self.band_count,
            "transform": self.transform,
            "crs": self.crs,
            "nodata": self.nodata,
        }
        with rasterio.open(path, "w", **profile) as dst:
            dst.write(self.data)
