"""
Raster layer handle using Rasterio
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import rasterio
from numpy.typing import NDArray
from rasterio.enums import Resampling
from rasterio.transform import Affine
from rasterio.windows import Window

from geoextract.core.config import ExtractionConfig, get_config
from geoextract.core.tile import Interpolation, NoData, RasterTile
from geoextract.query.raster import compute_window, extract_tile

if TYPE_CHECKING:
    from geoextract.core.dataset import Dataset

logger = logging.getLogger(__name__)


class RasterLayer:
    """
    Raster layer of a Dataset (or a standalone raster file)

    Provides georeference access, window reads and image extraction. The
    underlying rasterio handle belongs to the parent Dataset.

    Attributes:
        dataset: Parent Dataset (kept alive by this layer)
        name: Subdataset name ("" for the dataset's own raster)

    Examples:
        >>> layer = RasterLayer.open("dem.tif")
        >>> layer.is_valid()
        True
        >>> tile = layer.get_image(500000.0, 5200000.0, 1000.0, 256, Interpolation.BILINEAR)
        >>> tile.data.shape
        (1, 256, 256)
    """

    def __init__(self, handle, dataset: "Dataset | None" = None, name: str = ""):
        self._handle = handle
        self.dataset = dataset
        self.name = name
        self._lock = dataset.lock if dataset is not None else threading.RLock()

    @classmethod
    def open(
        cls, file_path: Union[str, Path], config: ExtractionConfig | None = None
    ) -> "RasterLayer":
        """
        Open a raster file such as a GeoTIFF as a standalone layer

        Never raises for unreadable files; check ``is_valid()``.
        """
        from geoextract.core.dataset import Dataset

        return Dataset(file_path, config, vector=False).get_raster_layer("")

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def config(self) -> ExtractionConfig:
        return self.dataset.config if self.dataset is not None else get_config()

    @property
    def path(self) -> str:
        return self._handle.name if self._handle is not None else ""

    def is_valid(self) -> bool:
        """
        True if the raster is open and has a usable georeference

        Requires at least one band, a non-empty grid and a non-rotated,
        invertible affine transform.
        """
        handle = self._handle
        if handle is None or handle.closed:
            return False
        if self.dataset is not None and self.dataset.closed:
            return False
        if handle.count < 1 or handle.width < 1 or handle.height < 1:
            return False
        t = handle.transform
        return t.b == 0 and t.d == 0 and t.a != 0 and t.e != 0

    # ------------------------------------------------------------------
    # Georeference
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._handle.width

    @property
    def height(self) -> int:
        return self._handle.height

    @property
    def count(self) -> int:
        return self._handle.count

    @property
    def transform(self) -> Affine:
        return self._handle.transform

    @property
    def crs(self) -> Any:
        return self._handle.crs

    @property
    def nodata(self) -> Any:
        return self._handle.nodata

    @property
    def bounds(self):
        return self._handle.bounds

    def get_geotransform(self) -> tuple[float, float, float, float, float, float]:
        """
        Six affine coefficients in GDAL order

        Returns:
            (origin_x, pixel_width, row_rotation, origin_y, column_rotation, pixel_height)
        """
        return tuple(self.transform.to_gdal())

    def get_resolution(self) -> tuple[float, float]:
        """Pixel size (x, y) in native units"""
        return (abs(self.transform.a), abs(self.transform.e))

    def window_for_square(
        self, top_left_x: float, top_left_y: float, size_x: float, size_y: float | None = None
    ) -> Window:
        """Fractional pixel window covering a world-space square or rectangle"""
        return compute_window(self.transform, top_left_x, top_left_y, size_x, size_y)

    def get_metadata(self) -> dict[str, Any]:
        """
        Raster metadata

        Returns:
            Dictionary with crs, transform, bounds, width, height, count,
            dtype and nodata (empty dict for invalid layers)
        """
        if not self.is_valid():
            return {}
        handle = self._handle
        return {
            "crs": handle.crs,
            "transform": handle.transform,
            "bounds": handle.bounds,
            "width": handle.width,
            "height": handle.height,
            "count": handle.count,
            "dtype": handle.dtypes[0],
            "nodata": handle.nodata,
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_window(
        self,
        window: Window,
        out_shape: tuple[int, int] | None = None,
        resampling: Resampling = Resampling.nearest,
    ) -> NDArray:
        """
        Read all bands of a pixel window

        Args:
            window: Pixel window inside the raster
            out_shape: Optional (rows, cols) to resample to
            resampling: Resampling used when out_shape differs from the window

        Returns:
            Array shaped (bands, rows, cols)
        """
        kwargs: dict[str, Any] = {"window": window, "resampling": resampling}
        if out_shape is not None:
            kwargs["out_shape"] = (self.count, *out_shape)

        with self._lock, rasterio.Env(**self.config.gdal_options):
            return self._handle.read(**kwargs)

    def get_image(
        self,
        top_left_x: float,
        top_left_y: float,
        size_meters: float,
        img_size: int,
        interpolation_type: Union[int, str, Interpolation] = Interpolation.NEAREST,
    ) -> Union[RasterTile, NoData]:
        """
        Extract an img_size x img_size image of a world-space square

        Returns:
            RasterTile, or NO_DATA when the square lies outside the raster or
            the layer is invalid
        """
        return extract_tile(self, top_left_x, top_left_y, size_meters, img_size, interpolation_type)

    def __repr__(self) -> str:
        if not self.is_valid():
            return f"<RasterLayer (invalid): {self.name or self.path}>"
        return (
            f"<RasterLayer: {self.name or self.path}>\n"
            f"  Size: {self.width} x {self.height}\n"
            f"  Bands: {self.count}\n"
            f"  CRS: {self.crs}"
        )
