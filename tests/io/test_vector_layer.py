"""
Tests for FeatureLayer
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from geoextract.core.geometry import GeometryType
from geoextract.io.vector import FeatureLayer


@pytest.fixture
def points(vector_path):
    return FeatureLayer.open(vector_path)


class TestFeatureLayer:
    """Test layer access"""

    def test_open_first_layer(self, points):
        """Test opening the first layer of a file"""
        assert points.is_valid()
        assert points.feature_count() == 4
        assert points.crs.to_epsg() == 3857

    def test_invalid_layer_queries_are_empty(self, tmp_path):
        """Test that an invalid layer answers with empty lists"""
        layer = FeatureLayer.open(str(tmp_path / "missing.gpkg"))
        assert not layer.is_valid()
        assert layer.feature_count() == 0
        assert layer.get_all_features() == []
        assert layer.get_features_near_position(0.0, 0.0, 10.0, 10) == []
        assert layer.crop_lines_to_square(0.0, 100.0, 100.0) == []

    def test_all_features_storage_order(self, points):
        """Test full scans keep storage order and null geometries"""
        features = points.get_all_features()
        assert [f.get_attribute("name") for f in features] == ["origin", "near", "far", "unplaced"]
        assert [f.fid for f in features] == [1, 2, 3, 4]
        assert features[3].geometry is None
        assert features[3].geometry_type is GeometryType.NONE
        assert features[3].get_attribute("value") is None

    def test_all_features_explodes_multipart(self, vector_path):
        """Test that multi-polygons yield one feature per part"""
        from geoextract.core.dataset import open_dataset

        polygons = open_dataset(vector_path).get_feature_layer("polygons")
        features = polygons.get_all_features()
        assert [f.get_attribute("name") for f in features] == ["courtyard", "islands", "islands"]
        assert len(features[0].get_polygon().holes) == 1

    def test_returned_features_are_copies(self, points):
        """Test that returned features share nothing with the layer"""
        first = points.get_all_features()[0]
        attributes = first.get_attributes()
        attributes["name"] = "changed"

        again = points.get_all_features()[0]
        assert again.get_attribute("name") == "origin"
        assert first.get_attribute("name") == "origin"

    def test_reload(self, points):
        """Test dropping the layer cache"""
        assert points.feature_count() == 4
        points.reload()
        assert points.feature_count() == 4


class TestNearPosition:
    """Test radius queries through the layer"""

    def test_points_near(self, points):
        """Test point radius query"""
        features = points.get_points_near_position(0.0, 0.0, 10.0, 10)
        assert [f.get_attribute("name") for f in features] == ["origin", "near"]

    def test_features_near_includes_missing_geometry_last(self, points):
        """Test that features without geometry come last"""
        features = points.get_features_near_position(0.0, 0.0, 10.0, 10)
        assert [f.get_attribute("name") for f in features] == ["origin", "near", "unplaced"]

    def test_truncation_keeps_closest(self, points):
        """Test truncation keeps the closest features"""
        features = points.get_features_near_position(4.0, 0.0, 200.0, 2)
        assert [f.get_attribute("name") for f in features] == ["near", "origin"]

    def test_lines_near(self, vector_path):
        """Test line radius query ordered by distance"""
        from geoextract.core.dataset import open_dataset

        lines = open_dataset(vector_path).get_feature_layer("lines")
        features = lines.get_lines_near_position(15.0, 12.0, 3.0)
        assert [f.get_attribute("name") for f in features] == ["pair", "diagonal"]


class TestCropLines:
    """Test line clipping through the layer"""

    def test_crop(self, vector_path):
        """Test clipping every line part to a square"""
        from geoextract.core.dataset import open_dataset

        lines = open_dataset(vector_path).get_feature_layer("lines")
        features = lines.crop_lines_to_square(0.0, 100.0, 100.0)
        assert [f.get_attribute("name") for f in features] == [
            "horizontal", "diagonal", "pair", "pair",
        ]
        assert all(f.geometry_type is GeometryType.LINE for f in features)

    def test_crop_points_layer_is_empty(self, points):
        """Test cropping a layer without lines"""
        assert points.crop_lines_to_square(-10.0, 10.0, 20.0) == []


class TestFeatureLayerThreads:
    """Test concurrent queries on one layer"""

    def test_concurrent_features_near(self, vector_path):
        """Test that threads sharing a layer see the single-threaded results"""
        positions = [(0.0, 0.0, 10.0), (5.0, 5.0, 50.0), (100.0, 100.0, 1000.0), (-3.0, 2.0, 1.0)]
        expected = [
            FeatureLayer.open(vector_path).get_features_near_position(x, y, r, 10)
            for x, y, r in positions
        ]

        # Fresh layer so the first load also races
        layer = FeatureLayer.open(vector_path)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(lambda p: layer.get_features_near_position(*p, 10), positions * 8)
            )

        for i, features in enumerate(results):
            assert features == expected[i % len(positions)]
