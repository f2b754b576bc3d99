"""
Feature layer handle using GeoPandas (pyogrio engine)
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

import geopandas as gpd

from geoextract.core.geometry import Feature, GeometryType
from geoextract.query import spatial

if TYPE_CHECKING:
    from geoextract.core.config import ExtractionConfig
    from geoextract.core.dataset import Dataset

logger = logging.getLogger(__name__)


class FeatureLayer:
    """
    Vector layer of a Dataset

    Layer data is read once on first use and kept on the handle; every query
    returns freshly built Features that share nothing with that cache.
    An invalid layer answers every query with an empty list.

    Attributes:
        dataset: Parent Dataset (kept alive by this layer)
        layer_name: Name of the layer inside the dataset (None if invalid)

    Examples:
        >>> layer = FeatureLayer.open("wells.shp")
        >>> nearby = layer.get_features_near_position(1500.0, 300.0, 50.0, 10)
        >>> roads = Dataset("city.gpkg").get_feature_layer("roads")
        >>> tile_roads = roads.crop_lines_to_square(0.0, 1000.0, 1000.0, 500)
    """

    def __init__(self, dataset: "Dataset | None", layer_name: Optional[str]):
        self.dataset = dataset
        self.layer_name = layer_name
        self._lock = dataset.lock if dataset is not None else threading.RLock()
        self._frame: gpd.GeoDataFrame | None = None

    @classmethod
    def open(
        cls, file_path: Union[str, Path], config: "ExtractionConfig | None" = None
    ) -> "FeatureLayer":
        """
        Open the first layer of a vector file (e.g. a single-layer Shapefile)

        Never raises for unreadable files; check ``is_valid()``.
        """
        from geoextract.core.dataset import Dataset

        return Dataset(file_path, config).get_feature_layer("")

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def is_valid(self) -> bool:
        return (
            self.dataset is not None
            and self.layer_name is not None
            and self.dataset.is_valid()
        )

    def _load(self) -> gpd.GeoDataFrame | None:
        """Layer data, read on first use"""
        if not self.is_valid():
            return None
        if self._frame is None:
            from geoextract.core.dataset import OPEN_ERRORS

            try:
                frame = gpd.read_file(
                    self.dataset.path, layer=self.layer_name, engine="pyogrio", fid_as_index=True
                )
            except OPEN_ERRORS as e:
                logger.warning("Could not read layer %r of %s: %s", self.layer_name, self.dataset.path, e)
                return None

            if not isinstance(frame, gpd.GeoDataFrame):
                # Attribute-only table
                frame = gpd.GeoDataFrame(frame, geometry=gpd.GeoSeries([None] * len(frame), index=frame.index))

            logger.debug("Loaded %d feature(s) from layer %r", len(frame), self.layer_name)
            self._frame = frame
        return self._frame

    def reload(self) -> None:
        """Drop cached layer data so the next query re-reads the source"""
        with self._lock:
            self._frame = None

    @property
    def crs(self) -> Any:
        with self._lock:
            frame = self._load()
            return frame.crs if frame is not None else None

    def feature_count(self) -> int:
        with self._lock:
            frame = self._load()
            return len(frame) if frame is not None else 0

    def get_all_features(self) -> list[Feature]:
        """All features in storage order (empty for invalid layers)"""
        with self._lock:
            frame = self._load()
            if frame is None:
                return []
            return spatial.all_features(frame)

    def get_features_near_position(
        self,
        pos_x: float,
        pos_y: float,
        radius: float,
        max_features: Optional[int] = None,
        geometry_type: Optional[GeometryType] = None,
    ) -> list[Feature]:
        """
        Up to max_features features within radius of (pos_x, pos_y), closest first

        Features without geometry are included after all geometric matches
        unless a geometry_type is requested.
        """
        with self._lock:
            frame = self._load()
            if frame is None:
                return []
            return spatial.features_near_position(
                frame, pos_x, pos_y, radius, max_features, geometry_type
            )

    def get_points_near_position(
        self, pos_x: float, pos_y: float, radius: float, max_points: Optional[int] = None
    ) -> list[Feature]:
        return self.get_features_near_position(
            pos_x, pos_y, radius, max_points, geometry_type=GeometryType.POINT
        )

    def get_lines_near_position(
        self, pos_x: float, pos_y: float, radius: float, max_lines: Optional[int] = None
    ) -> list[Feature]:
        return self.get_features_near_position(
            pos_x, pos_y, radius, max_lines, geometry_type=GeometryType.LINE
        )

    def crop_lines_to_square(
        self,
        top_left_x: float,
        top_left_y: float,
        size_meters: float,
        max_lines: Optional[int] = None,
    ) -> list[Feature]:
        """Line features clipped to the square [x, x + size] x [y - size, y]"""
        with self._lock:
            frame = self._load()
            if frame is None:
                return []
            return spatial.crop_lines_to_square(frame, top_left_x, top_left_y, size_meters, max_lines)

    def __repr__(self) -> str:
        state = "valid" if self.is_valid() else "invalid"
        path = self.dataset.path if self.dataset is not None else ""
        return f"<FeatureLayer ({state}): {path}:{self.layer_name}>"
