"""
Dataset Handle

An opened geospatial data source (file or GDAL connection string) holding
raster content, vector layers, or both.

Ownership:
- A Dataset exclusively owns the rasterio handles it opens, including the
  handles of raster subdatasets and child Datasets resolved through it.
- Layers keep a reference to their parent Dataset and never close shared
  handles themselves.
- Handles are released exactly once: on ``close()``, on context-manager
  exit, or when the Dataset is garbage-collected.

Thread safety:
- Each Dataset owns a re-entrant lock that every derived layer acquires for
  the duration of a query, so concurrent queries against one handle are
  serialized. Independent Datasets share no state and can be queried from
  separate threads in parallel.
"""

import logging
import threading
import weakref
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import geopandas as gpd
import rasterio
from rasterio.errors import RasterioIOError

from geoextract.core.config import ExtractionConfig, get_config

if TYPE_CHECKING:
    from geoextract.io.raster import RasterLayer
    from geoextract.io.vector import FeatureLayer

logger = logging.getLogger(__name__)

# Errors raised by rasterio/pyogrio for unreadable sources
# (pyogrio's DataSourceError and DataLayerError are RuntimeErrors)
OPEN_ERRORS = (RasterioIOError, OSError, RuntimeError, ValueError)


def _release(handles: list, children: list, path: str) -> None:
    """Close every owned handle; runs at most once per Dataset"""
    for child in children:
        child.close()
    children.clear()
    for handle in handles:
        handle.close()
    if handles:
        logger.debug("Closed %d handle(s) for %s", len(handles), path)
    handles.clear()


class Dataset:
    """
    Opened geospatial dataset

    Opening never raises for missing or corrupt sources; check
    ``is_valid()`` instead.

    Attributes:
        path: Path or GDAL connection string
        config: Engine configuration used for opens and reads
        vector: Whether vector layers were listed (False for raster-only
                sources such as pyramid tiles)

    Examples:
        >>> with Dataset("city.gpkg") as ds:
        ...     if ds.is_valid():
        ...         roads = ds.get_feature_layer("roads")
        ...         dem = ds.get_raster_layer("elevation")
    """

    def __init__(
        self,
        path: Union[str, Path],
        config: ExtractionConfig | None = None,
        vector: bool = True,
    ):
        self.path = str(path)
        self.config = config or get_config()
        self.vector = vector
        self._lock = threading.RLock()
        self._handles: list = []
        self._children: list["Dataset"] = []
        # Subdataset handles and child Datasets by name, opened once
        self._sub_handles: dict[str, Any] = {}
        self._sub_datasets: dict[str, "Dataset"] = {}
        self._raster = None
        self._layer_names: list[str] = []
        self._finalizer = weakref.finalize(
            self, _release, self._handles, self._children, self.path
        )

        try:
            self._open()
        except BaseException:
            self._finalizer()
            raise

    def _open(self) -> None:
        try:
            with rasterio.Env(**self.config.gdal_options):
                self._raster = rasterio.open(self.path)
            self._handles.append(self._raster)
        except OPEN_ERRORS as e:
            logger.debug("No raster content in %s: %s", self.path, e)

        if self.vector:
            try:
                layers = gpd.list_layers(self.path)
                self._layer_names = [str(name) for name in layers["name"]]
            except OPEN_ERRORS as e:
                logger.debug("No vector content in %s: %s", self.path, e)

        if self.is_valid():
            logger.info(
                "Opened dataset %s (raster=%s, %d vector layer(s))",
                self.path,
                self._raster is not None,
                len(self._layer_names),
            )
        else:
            logger.warning("Could not open dataset: %s", self.path)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def is_valid(self) -> bool:
        """True if the source was opened and has not been closed"""
        return not self.closed and (self._raster is not None or bool(self._layer_names))

    def close(self) -> None:
        """Release all owned handles (safe to call repeatedly)"""
        with self._lock:
            self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else ("valid" if self.is_valid() else "invalid")
        return f"<Dataset ({state}): {self.path}>"

    # ------------------------------------------------------------------
    # Content listing
    # ------------------------------------------------------------------

    def raster_layer_names(self) -> list[str]:
        """Names of raster subdatasets (the dataset's own raster is "")"""
        if not self.is_valid() or self._raster is None:
            return []
        names = [""] if self._raster.count > 0 else []
        return names + list(self._raster.subdatasets)

    def feature_layer_names(self) -> list[str]:
        return list(self._layer_names) if self.is_valid() else []

    def _resolve_subdataset(self, name: str) -> str | None:
        """Match a subdataset by full name or by its last ':' component"""
        if self._raster is None:
            return None
        for sub in self._raster.subdatasets:
            if sub == name or sub.rsplit(":", 1)[-1].strip('"') == name:
                return sub
        return None

    # ------------------------------------------------------------------
    # Layer resolution
    # ------------------------------------------------------------------

    def get_raster_layer(self, name: str = "") -> "RasterLayer":
        """
        Raster layer by name

        An empty name returns the dataset's own raster. Unknown names return
        an invalid layer; check ``RasterLayer.is_valid()``.
        """
        from geoextract.io.raster import RasterLayer

        with self._lock:
            if not self.is_valid():
                return RasterLayer(None, dataset=self, name=name)
            if not name:
                return RasterLayer(self._raster, dataset=self, name=name)

            sub = self._resolve_subdataset(name)
            if sub is None:
                logger.warning("Unknown raster subdataset %r in %s", name, self.path)
                return RasterLayer(None, dataset=self, name=name)

            handle = self._sub_handles.get(sub)
            if handle is None:
                handle = self._open_raster(sub)
                if handle is not None:
                    self._sub_handles[sub] = handle
            return RasterLayer(handle, dataset=self, name=name)

    def get_subdataset(self, name: str) -> "Dataset":
        """
        Open a named subdataset as a Dataset of its own

        The child is opened once per name and closed together with this
        Dataset. Unknown names return an invalid Dataset.
        """
        with self._lock:
            cached = self._sub_datasets.get(name)
            if cached is not None and not cached.closed:
                return cached

            sub = self._resolve_subdataset(name) if self.is_valid() else None
            if sub is None:
                logger.warning("Unknown subdataset %r in %s", name, self.path)
                child = _InvalidDataset(f"{self.path}:{name}", self.config)
            else:
                child = Dataset(sub, self.config)
            self._children.append(child)
            self._sub_datasets[name] = child
            return child

    def get_feature_layer(self, name: str = "") -> "FeatureLayer":
        """
        Vector layer by name

        An empty name returns the first layer, which is convenient for
        single-layer files such as Shapefiles. Unknown names return an
        invalid layer; check ``FeatureLayer.is_valid()``.
        """
        from geoextract.io.vector import FeatureLayer

        with self._lock:
            if not self.is_valid() or not self._layer_names:
                return FeatureLayer(self, None)
            if not name:
                return FeatureLayer(self, self._layer_names[0])
            if name not in self._layer_names:
                logger.warning("Unknown feature layer %r in %s", name, self.path)
                return FeatureLayer(self, None)
            return FeatureLayer(self, name)

    def _open_raster(self, path: str) -> Any:
        try:
            with rasterio.Env(**self.config.gdal_options):
                handle = rasterio.open(path)
        except OPEN_ERRORS as e:
            logger.warning("Could not open raster %s: %s", path, e)
            return None
        self._handles.append(handle)
        return handle


class _InvalidDataset(Dataset):
    """Dataset placeholder that never touches the filesystem"""

    def _open(self) -> None:
        pass


def open_dataset(path: Union[str, Path], config: ExtractionConfig | None = None) -> Dataset:
    """
    Open a dataset

    Args:
        path: File path or GDAL connection string
        config: Engine configuration (default: process-wide config)

    Returns:
        Dataset; invalid if the source could not be opened

    Examples:
        >>> import geoextract as gx
        >>> ds = gx.open_dataset("terrain.tif")
        >>> ds.is_valid()
        True
        >>> gx.open_dataset("missing.tif").is_valid()
        False
    """
    return Dataset(path, config)
